"""
Option Portfolio: pure logic module

Scores a standing list of options (projects, bets, commitments) the user
keeps alive over time. Contains no database calls; callers pass plain
objects with the attributes below.

    gain_potential, effort_cost, multiplier_effect, reversibility,
    status, last_reviewed_at
"""

import datetime
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Tuple

from .rules import Condition, Rule, all_of, first_match

ACTIVE = "active"
KILLED = "killed"
CATEGORIES = ("project", "career", "relationship", "asset", "location")

_CLASSIFICATION_RULES = (
    Rule("Optimization Trap", all_of(Condition("effort", ">=", 7), Condition("reversibility", "<=", 3))),
    Rule("High Optionality", all_of(Condition("gem", ">=", 8), Condition("reversibility", ">=", 7))),
    Rule("Neutral"),
)

_WARNING_RULES = (
    Rule("High effort with low reversibility", all_of(Condition("effort", ">=", 7), Condition("reversibility", "<=", 3))),
    Rule("Low future optionality multiplier", Condition("multiplier", "<=", 3)),
    Rule("Effort outweighs upside", all_of(Condition("effort", ">=", 8), Condition("gain", "<=", 4))),
)


@dataclass(frozen=True)
class OptionEvaluation:
    gem: float
    classification: str
    warnings: Tuple[str, ...]


def gem_score(option: Any) -> float:
    gain = option.gain_potential or 0
    multiplier = option.multiplier_effect or 0
    effort = max(1, option.effort_cost or 1)
    return (gain * multiplier) / effort


def evaluate_option(option: Any) -> OptionEvaluation:
    gem = gem_score(option)
    facts = {
        "gem": gem,
        "gain": option.gain_potential,
        "effort": option.effort_cost,
        "multiplier": option.multiplier_effect,
        "reversibility": option.reversibility,
    }
    return OptionEvaluation(
        gem=round(gem, 2),
        classification=first_match(_CLASSIFICATION_RULES, facts),
        warnings=tuple(rule.label for rule in _WARNING_RULES if rule.matches(facts)),
    )


def _as_utc(moment: datetime.datetime) -> datetime.datetime:
    # SQLite hands back naive datetimes; they are stored as UTC
    if moment.tzinfo is None:
        return moment.replace(tzinfo=datetime.timezone.utc)
    return moment


def decay_factor(last_reviewed_at: Optional[datetime.datetime], now: datetime.datetime,
                 horizon_days: float = 90, floor: float = 0.5) -> float:
    """Linear decay from 1.0 to ``floor`` over ``horizon_days`` without review."""
    if last_reviewed_at is None:
        return floor
    days = (_as_utc(now) - _as_utc(last_reviewed_at)).total_seconds() / 86400
    days = max(0.0, days)
    return max(floor, 1 - days / horizon_days)


def portfolio_score(options: Iterable[Any], now: datetime.datetime,
                    horizon_days: float = 90, floor: float = 0.5) -> float:
    total = 0.0
    for option in options:
        if option.status != ACTIVE:
            continue
        decay = decay_factor(option.last_reviewed_at, now, horizon_days, floor)
        total += gem_score(option) * option.reversibility * decay
    return round(total, 1)
