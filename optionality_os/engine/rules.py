"""
Rule primitives shared by both rule sets.

Conditions are plain data so that thresholds live in the rule-set
configuration instead of in branching code. Every rule is evaluated against
a flat "facts" mapping (normalized answers merged with computed scores).
Missing facts never match.
"""

import operator
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence, Tuple

_OPERATORS = {
    ">": operator.gt,
    ">=": operator.ge,
    "<": operator.lt,
    "<=": operator.le,
    "==": operator.eq,
    "!=": operator.ne,
}


@dataclass(frozen=True)
class Condition:
    """A single comparison of one named fact against a constant."""
    fact: str
    op: str
    value: Any

    def __post_init__(self):
        if self.op not in _OPERATORS:
            raise ValueError(f"Unsupported operator: {self.op}")

    def holds(self, facts: Mapping[str, Any]) -> bool:
        actual = facts.get(self.fact)
        if actual is None:
            return False
        try:
            return bool(_OPERATORS[self.op](actual, self.value))
        except TypeError:
            return False


@dataclass(frozen=True)
class AllOf:
    conditions: Tuple[Any, ...]

    def holds(self, facts: Mapping[str, Any]) -> bool:
        return all(c.holds(facts) for c in self.conditions)


@dataclass(frozen=True)
class AnyOf:
    conditions: Tuple[Any, ...]

    def holds(self, facts: Mapping[str, Any]) -> bool:
        return any(c.holds(facts) for c in self.conditions)


def all_of(*conditions) -> AllOf:
    return AllOf(tuple(conditions))


def any_of(*conditions) -> AnyOf:
    return AnyOf(tuple(conditions))


@dataclass(frozen=True)
class Rule:
    """A labelled predicate. ``when=None`` always matches (catch-all)."""
    label: str
    when: Optional[Any] = None

    def matches(self, facts: Mapping[str, Any]) -> bool:
        return self.when is None or self.when.holds(facts)


def first_match(rules: Sequence[Rule], facts: Mapping[str, Any], default: Optional[str] = None) -> Optional[str]:
    """Return the label of the first matching rule, in declaration order."""
    for rule in rules:
        if rule.matches(facts):
            return rule.label
    return default


@dataclass(frozen=True)
class Band:
    threshold: float
    letter: str
    name: str


def band(value: float, ladder: Sequence[Band], floor: Band) -> Band:
    """
    Place ``value`` on a threshold ladder.

    The ladder is walked top-down (highest threshold first) and the first
    band whose threshold is met wins, so a value sitting exactly on a
    boundary lands in the higher band.
    """
    for step in sorted(ladder, key=lambda b: b.threshold, reverse=True):
        if value >= step.threshold:
            return step
    return floor
