"""
Result Assembler.

``ScoringEngine`` wires the pipeline for one rule set:

    normalize -> calculate -> classify -> recommend -> assemble

``score`` is pure and idempotent. ``assess`` adds the display identifier,
which is the only step that reads the clock or randomness.
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from .calculator import ScoreCard
from .classifier import classify
from .identifier import IdentifierGenerator
from .recommendations import ReversibleMove, build_facts, generate_moves, generate_warnings
from .rulesets import RuleSet, get_rule_set
from .schema import Answers, AnswerType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Scoring:
    """Everything derived from answers alone."""
    scores: ScoreCard
    classification: Optional[str]
    tier: Optional[str]
    tier_name: Optional[str]
    narrative: str
    moves: Tuple[ReversibleMove, ...]
    moves_status: str
    warnings: Tuple[str, ...]


@dataclass(frozen=True)
class Result:
    rule_set: str
    rule_set_version: str
    client_id: str
    identity: Mapping[str, Any]
    notes: Mapping[str, Any]
    answers: Answers
    scoring: Scoring
    headline_metric: str = field(default="")

    def __post_init__(self):
        object.__setattr__(self, "identity", MappingProxyType(dict(self.identity)))
        object.__setattr__(self, "notes", MappingProxyType(dict(self.notes)))

    # Convenience accessors so callers rarely reach into ``scoring``.
    @property
    def scores(self) -> ScoreCard:
        return self.scoring.scores

    @property
    def classification(self) -> Optional[str]:
        return self.scoring.classification

    @property
    def tier(self) -> Optional[str]:
        return self.scoring.tier

    @property
    def moves(self) -> Tuple[ReversibleMove, ...]:
        return self.scoring.moves

    @property
    def headline(self) -> float:
        return self.scoring.scores.metrics().get(self.headline_metric, 0.0)

    def to_dict(self) -> Dict[str, Any]:
        s = self.scoring
        return {
            "rule_set": self.rule_set,
            "rule_set_version": self.rule_set_version,
            "client_id": self.client_id,
            "identity": dict(self.identity),
            "notes": dict(self.notes),
            "answers": self.answers.as_dict(),
            "scores": s.scores.as_dict(),
            "headline_metric": self.headline_metric,
            "headline": self.headline,
            "classification": s.classification,
            "tier": s.tier,
            "tier_name": s.tier_name,
            "narrative": s.narrative,
            "moves": [m.as_dict() for m in s.moves],
            "moves_status": s.moves_status,
            "warnings": list(s.warnings),
        }


class ScoringEngine:
    """One engine instance per rule set; stateless between calls."""

    def __init__(self, rule_set: Union[RuleSet, str], identifier_generator: Optional[IdentifierGenerator] = None):
        self.rule_set = get_rule_set(rule_set) if isinstance(rule_set, str) else rule_set
        self.identifiers = identifier_generator or IdentifierGenerator()

    def normalize(self, raw: Optional[Mapping[str, Any]]) -> Answers:
        if isinstance(raw, Answers):
            if raw.rule_set == self.rule_set.name:
                return raw
            raw = raw.as_dict()
        return self.rule_set.schema.normalize(raw)

    def score(self, answers: Answers) -> Scoring:
        rule_set = self.rule_set
        card = rule_set.calculate(answers, rule_set)
        metrics = card.metrics()
        verdict = classify(rule_set, metrics)

        facts = build_facts(answers.values, metrics)
        moves, moves_status = generate_moves(rule_set, facts)
        warnings = generate_warnings(rule_set, facts)

        return Scoring(
            scores=card,
            classification=verdict.classification,
            tier=verdict.tier,
            tier_name=verdict.tier_name,
            narrative=verdict.narrative,
            moves=moves,
            moves_status=moves_status,
            warnings=warnings,
        )

    def assess(self, raw: Optional[Mapping[str, Any]]) -> Result:
        answers = self.normalize(raw)
        scoring = self.score(answers)
        client_id = self.identifiers.generate(answers.get("first_name"), answers.get("email"))

        schema = self.rule_set.schema
        identity = {q.id: answers.get(q.id) for q in schema.questions if q.type == AnswerType.IDENTITY}
        notes = {q.id: answers.get(q.id) for q in schema.questions if q.type == AnswerType.FREE_TEXT}

        logger.debug(
            "Assessed %s as %s (%s=%s)",
            client_id, scoring.classification, self.rule_set.headline_metric,
            scoring.scores.metrics().get(self.rule_set.headline_metric),
        )
        return Result(
            rule_set=self.rule_set.name,
            rule_set_version=self.rule_set.version,
            client_id=client_id,
            identity=identity,
            notes=notes,
            answers=answers,
            scoring=scoring,
            headline_metric=self.rule_set.headline_metric,
        )
