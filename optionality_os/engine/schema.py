"""
Answer schema: the closed set of questions a rule set understands.

``AnswerSchema.normalize`` is the boundary between loosely-typed input
(JSON bodies, imported vault files) and the scoring engine. After it runs,
every declared question has a value from its domain or ``None``, and
nothing else is present.
"""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

_TRUE = {"true", "yes", "y", "1", "on"}
_FALSE = {"false", "no", "n", "0", "off", ""}


class AnswerType(str, Enum):
    NUMERIC = "numeric"
    PERCENTAGE = "percentage"
    SINGLE_CHOICE = "single_choice"
    MULTI_CHOICE = "multi_choice"
    BOOLEAN = "boolean"
    FREE_TEXT = "free_text"
    IDENTITY = "identity"


_BLANK_IS_MISSING = (AnswerType.NUMERIC, AnswerType.PERCENTAGE, AnswerType.SINGLE_CHOICE)


@dataclass(frozen=True)
class Question:
    id: str
    type: AnswerType
    label: str = ""
    options: Tuple[str, ...] = ()
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    default: Any = None
    integer: bool = False
    step: str = "quiz"

    @property
    def scored(self) -> bool:
        return self.type not in (AnswerType.FREE_TEXT, AnswerType.IDENTITY)

    def bounds(self) -> Tuple[Optional[float], Optional[float]]:
        if self.type == AnswerType.PERCENTAGE:
            return 0.0, 100.0
        return self.minimum, self.maximum

    def coerce(self, raw: Any) -> Any:
        """Coerce one raw value into this question's domain."""
        if raw is None:
            return self.default
        if isinstance(raw, str) and not raw.strip() and self.type in _BLANK_IS_MISSING:
            return self.default
        handler = _COERCERS[self.type]
        return handler(self, raw)

    def describe(self) -> Dict[str, Any]:
        low, high = self.bounds()
        return {
            "id": self.id,
            "type": self.type.value,
            "label": self.label,
            "options": list(self.options),
            "min": low,
            "max": high,
            "default": list(self.default) if isinstance(self.default, tuple) else self.default,
            "step": self.step,
        }


def _coerce_number(question: Question, raw: Any):
    if isinstance(raw, bool):
        return question.default
    try:
        value = float(raw)
    except (TypeError, ValueError):
        logger.warning("Non-numeric answer for '%s': %r, using default", question.id, raw)
        return question.default
    if math.isnan(value) or math.isinf(value):
        return question.default
    low, high = question.bounds()
    if low is not None:
        value = max(low, value)
    if high is not None:
        value = min(high, value)
    if question.integer:
        return int(round(value))
    return int(value) if value.is_integer() else value


def _coerce_single(question: Question, raw: Any):
    label = str(raw).strip()
    if label in question.options:
        return label
    logger.warning("Unknown label for '%s': %r", question.id, raw)
    return None


def _coerce_multi(question: Question, raw: Any):
    if isinstance(raw, str):
        raw = [raw] if raw.strip() else []
    elif isinstance(raw, Mapping):
        # vault import rebuilds lists, but tolerate {"0": ..., "1": ...}
        raw = list(raw.values())
    try:
        chosen = {str(item).strip() for item in raw}
    except TypeError:
        logger.warning("Multi-choice answer for '%s' is not a list: %r", question.id, raw)
        return tuple(question.default or ())
    unknown = chosen.difference(question.options)
    if unknown:
        logger.warning("Dropping unknown options for '%s': %s", question.id, sorted(unknown))
    # declared order, so equal selections always normalize identically
    return tuple(opt for opt in question.options if opt in chosen)


def _coerce_bool(question: Question, raw: Any):
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, (int, float)):
        return raw != 0
    text = str(raw).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    logger.warning("Unrecognized boolean for '%s': %r", question.id, raw)
    return question.default


def _coerce_text(question: Question, raw: Any):
    return str(raw)


_COERCERS = {
    AnswerType.NUMERIC: _coerce_number,
    AnswerType.PERCENTAGE: _coerce_number,
    AnswerType.SINGLE_CHOICE: _coerce_single,
    AnswerType.MULTI_CHOICE: _coerce_multi,
    AnswerType.BOOLEAN: _coerce_bool,
    AnswerType.FREE_TEXT: _coerce_text,
    AnswerType.IDENTITY: _coerce_text,
}


@dataclass(frozen=True)
class Answers:
    """Normalized, read-only answers for one rule set."""
    rule_set: str
    values: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    def __getitem__(self, key: str) -> Any:
        return self.values[key]

    def get(self, key: str, default: Any = None) -> Any:
        value = self.values.get(key)
        return default if value is None else value

    def as_dict(self) -> Dict[str, Any]:
        return {k: list(v) if isinstance(v, tuple) else v for k, v in self.values.items()}


@dataclass(frozen=True)
class AnswerSchema:
    name: str
    questions: Tuple[Question, ...]

    def __post_init__(self):
        ids = [q.id for q in self.questions]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Duplicate question ids in schema '{self.name}'")

    def question(self, question_id: str) -> Question:
        for q in self.questions:
            if q.id == question_id:
                return q
        raise KeyError(question_id)

    @property
    def ids(self) -> Tuple[str, ...]:
        return tuple(q.id for q in self.questions)

    def defaults(self) -> Dict[str, Any]:
        return {q.id: q.default for q in self.questions}

    def normalize(self, raw: Optional[Mapping[str, Any]]) -> Answers:
        raw = dict(raw or {})
        unknown = set(raw).difference(self.ids)
        if unknown:
            logger.warning("Schema '%s' dropping unknown fields: %s", self.name, sorted(unknown))
        values = {q.id: q.coerce(raw.get(q.id)) for q in self.questions}
        return Answers(rule_set=self.name, values=values)

    def describe(self):
        return [q.describe() for q in self.questions]
