"""
Classifier: pure logic module

Maps computed metrics to a classification, a tier band and a narrative
sentence. Rules are evaluated in declaration order; the first match wins.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Mapping, Optional

from .rules import band, first_match

if TYPE_CHECKING:
    from .rulesets import RuleSet


@dataclass(frozen=True)
class Verdict:
    classification: Optional[str]
    tier: Optional[str]
    tier_name: Optional[str]
    narrative: str


def classify(rule_set: "RuleSet", metrics: Mapping[str, float]) -> Verdict:
    """
    Args:
        rule_set: the rule set whose thresholds apply
        metrics:  flat metrics from ``ScoreCard.metrics()``

    Returns:
        Verdict. ``classification`` is None for rule sets without
        classification rules; ``tier`` is None for rule sets without a
        tier ladder.
    """
    classification = first_match(rule_set.classification_rules, metrics)

    tier = tier_name = None
    if rule_set.has_tiers:
        step = band(metrics.get(rule_set.tier_metric, 0.0), rule_set.tier_ladder, rule_set.tier_floor)
        tier, tier_name = step.letter, step.name

    # classification doubles as the narrative key when a rule set has one
    key = classification if classification is not None else first_match(rule_set.narrative_rules, metrics)
    narrative = rule_set.narratives.get(key, "") if key is not None else ""

    return Verdict(classification=classification, tier=tier, tier_name=tier_name, narrative=narrative)
