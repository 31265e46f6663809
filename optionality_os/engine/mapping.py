"""
Mapping tables: categorical answers -> numeric weights.

Lookups fail closed. An unrecognized or missing label returns the table's
declared default instead of raising, because answers may come from older
exports or free-text-adjacent inputs.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from ..exceptions import ConfigurationException


@dataclass(frozen=True)
class MappingTable:
    """label (or boolean) -> weight."""
    name: str
    weights: Mapping[Any, float]
    default: float = 0.0
    floor: Optional[float] = None

    def __post_init__(self):
        weights = dict(self.weights)
        default = self.default
        if self.floor is not None:
            weights = {k: max(self.floor, v) for k, v in weights.items()}
            default = max(self.floor, default)
        object.__setattr__(self, "weights", MappingProxyType(weights))
        object.__setattr__(self, "default", default)

    def lookup(self, label: Any) -> float:
        if label is None:
            return self.default
        try:
            return self.weights.get(label, self.default)
        except TypeError:
            # unhashable input (e.g. a list where a label was expected)
            return self.default

    @property
    def labels(self):
        return tuple(self.weights.keys())


@dataclass(frozen=True)
class SaturatingScale:
    """
    Numeric transform ``min(ceiling, value / full_at * ceiling)``.

    Negative or missing values score zero.
    """
    name: str
    full_at: float
    ceiling: float = 100.0

    def lookup(self, value: Any) -> float:
        if value is None or isinstance(value, bool):
            return 0.0
        try:
            value = float(value)
        except (TypeError, ValueError):
            return 0.0
        if self.full_at <= 0:
            return self.ceiling
        return max(0.0, min(self.ceiling, value / self.full_at * self.ceiling))


@dataclass(frozen=True)
class MappingTables:
    """The full, versioned set of tables for one rule set."""
    rule_set: str
    tables: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "tables", MappingProxyType(dict(self.tables)))

    def table(self, table_name: str):
        try:
            return self.tables[table_name]
        except KeyError:
            raise ConfigurationException(
                f"Rule set '{self.rule_set}' has no mapping table '{table_name}'",
                error_code="UNKNOWN_TABLE",
            )

    def lookup(self, table_name: str, label: Any) -> float:
        return self.table(table_name).lookup(label)

    def as_dict(self) -> Dict[str, Dict[str, float]]:
        return {
            name: dict(t.weights) if isinstance(t, MappingTable) else {"full_at": t.full_at, "ceiling": t.ceiling}
            for name, t in self.tables.items()
        }
