"""
Score Calculator: Answers x Mapping Tables -> ScoreCard.

Pure functions only. Every call recomputes the whole card; nothing is
cached between calls. Raw answers are translated to numbers exclusively
through the mapping tables; composite indices are built from the component
scores alone.
"""

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Dict, Mapping

from .schema import Answers

if TYPE_CHECKING:
    from .rulesets import RuleSet


@dataclass(frozen=True)
class ScoreCard:
    components: Mapping[str, float] = field(default_factory=dict)
    composites: Mapping[str, float] = field(default_factory=dict)
    pillars: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self):
        for name in ("components", "composites", "pillars"):
            object.__setattr__(self, name, MappingProxyType(dict(getattr(self, name))))

    def metrics(self) -> Dict[str, float]:
        """Flat view used by classification and recommendation rules."""
        merged = dict(self.pillars)
        merged.update(self.components)
        merged.update(self.composites)
        return merged

    def as_dict(self) -> Dict[str, Dict[str, float]]:
        return {
            "components": dict(self.components),
            "composites": dict(self.composites),
            "pillars": dict(self.pillars),
        }


# --- Shared arithmetic -------------------------------------------------------

def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def safe_ratio(numerator: float, denominator: float, minimum: float = 1.0) -> float:
    """Divide with the denominator clamped to ``minimum``."""
    return numerator / max(minimum, denominator)


def weighted_sum(scores: Mapping[str, float], weights: Mapping[str, float]) -> float:
    return sum(scores.get(name, 0.0) * weight for name, weight in weights.items())


def round_half_up(value: float, precision: int = 9) -> int:
    """Half rounds up; noise below ``precision`` decimals from the weighted sum is ignored."""
    return int(math.floor(round(value, precision) + 0.5))


# --- Decision-OS -------------------------------------------------------------

def decision_os_scores(answers: Answers, rule_set: "RuleSet") -> ScoreCard:
    """
    GEM and effective optionality for a single decision.

    ``effort`` is a divisor and is floored at 1 both in the mapping table
    and here at the formula site.
    """
    tables = rule_set.tables
    c = rule_set.constants

    gain = tables.lookup("gain", answers.get("upside"))
    effort = max(1.0, tables.lookup("effort", answers.get("effort")))
    reversibility = tables.lookup("reversibility", answers.get("reversibility"))
    time_penalty = tables.lookup("time_penalty", answers.get("time_to_signal"))

    tags = answers.get("multipliers", ())
    multiplier = min(c["multiplier_cap"], sum(tables.lookup("multipliers", tag) for tag in tags))

    gem_score = safe_ratio(gain * multiplier, effort)
    effective_optionality = safe_ratio(gain * multiplier * reversibility * time_penalty, effort)

    pillars = {
        "geography": reversibility * tables.lookup("mobility_bonus", answers.get("mobility_level")),
        "income": gain * (multiplier / 2),
        "capabilities": len(tags) * c["capability_per_tag"],
        "network": c["network_with_relationships"] if c["relationship_tag"] in tags else c["network_base"],
        "assets": (gain * reversibility) / 2,
    }

    return ScoreCard(
        components={
            "gain": gain,
            "effort": effort,
            "multiplier": multiplier,
            "reversibility": reversibility,
            "time_penalty": time_penalty,
        },
        composites={
            "gem_score": gem_score,
            "effective_optionality": effective_optionality,
            "pillar_total": sum(pillars.values()),
        },
        pillars=pillars,
    )


# --- Assessment --------------------------------------------------------------

def _jurisdiction(value) -> str:
    return str(value or "").strip().upper()


def assessment_scores(answers: Answers, rule_set: "RuleSet") -> ScoreCard:
    """Structural resilience score on a 0-100 scale."""
    tables = rule_set.tables
    c = rule_set.constants

    income = tables.lookup("income_sources", answers.get("income_sources"))
    if answers.get("income_concentration", 0) > c["concentration_penalty_above"]:
        income -= c["concentration_penalty"]
    income = clamp(income, 0.0, 100.0)

    split = _jurisdiction(answers.get("jurisdiction_tax")) != _jurisdiction(answers.get("jurisdiction_income"))
    leverage = (
        100.0
        + tables.lookup("leverage_debt", answers.get("leverage_debt"))
        + tables.lookup("leverage_guarantees", answers.get("leverage_guarantees"))
    )

    components = {
        "income": income,
        "currency": tables.lookup("currency_count", answers.get("currency_count")),
        "jurisdiction": tables.lookup("jurisdiction_split", split),
        "time": tables.lookup("time_buffer", answers.get("time_buffer")),
        "leverage": clamp(leverage, 0.0, 100.0),
        "reversibility": tables.lookup("reversibility", answers.get("commitment_reversibility")),
    }

    weighted_total = weighted_sum(components, rule_set.weights)
    adjustment = tables.lookup("structural_adjustment", answers.get("commitment_reversibility"))
    total = round_half_up(clamp(weighted_total + adjustment, 0.0, 100.0))

    return ScoreCard(
        components=components,
        composites={
            "weighted_total": weighted_total,
            "structural_adjustment": adjustment,
            "total": total,
        },
    )
