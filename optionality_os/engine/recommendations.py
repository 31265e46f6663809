"""
Recommendation Generator.

A fixed, ordered list of independent threshold rules. Rules are not
mutually exclusive and the output is never re-sorted: evaluation order is
the final order.
"""

from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Tuple

if TYPE_CHECKING:
    from .rulesets import RuleSet

MOVES_FOUND = "moves_found"
NO_WEAKNESSES = "no_weaknesses_detected"
NOT_APPLICABLE = "not_applicable"


@dataclass(frozen=True)
class ReversibleMove:
    area: str
    option: str
    reversibility: str
    risk: str

    def as_dict(self) -> Dict[str, str]:
        return asdict(self)


@dataclass(frozen=True)
class MoveRule:
    """Appends ``moves`` (in order) when ``when`` holds."""
    name: str
    when: Any
    moves: Tuple[ReversibleMove, ...]

    def fire(self, facts: Mapping[str, Any]) -> Tuple[ReversibleMove, ...]:
        return self.moves if self.when.holds(facts) else ()


def generate_moves(rule_set: "RuleSet", facts: Mapping[str, Any]) -> Tuple[Tuple[ReversibleMove, ...], str]:
    """
    Returns ``(moves, status)``.

    ``status`` distinguishes "nothing fired" from "this rule set has no
    move rules", so an empty tuple is never ambiguous.
    """
    if not rule_set.move_rules:
        return (), NOT_APPLICABLE
    moves: List[ReversibleMove] = []
    for rule in rule_set.move_rules:
        moves.extend(rule.fire(facts))
    return tuple(moves), (MOVES_FOUND if moves else NO_WEAKNESSES)


def generate_warnings(rule_set: "RuleSet", facts: Mapping[str, Any]) -> Tuple[str, ...]:
    return tuple(rule.label for rule in rule_set.warning_rules if rule.matches(facts))


def build_facts(answers_values: Mapping[str, Any], metrics: Mapping[str, float], extra: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """Merge raw answers with computed metrics; metrics win on name clashes."""
    facts = dict(answers_values)
    facts.update(metrics)
    if extra:
        facts.update(extra)
    return facts
