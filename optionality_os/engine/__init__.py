"""
Decision-scoring engine.

Pure, synchronous and free of I/O. Nothing in this package touches the
database, the network or global mutable state; the display identifier is
the single impure step and its clock and randomness are injectable.
"""

from .assembler import Result, Scoring, ScoringEngine
from .calculator import ScoreCard
from .identifier import IdentifierGenerator
from .recommendations import MOVES_FOUND, NO_WEAKNESSES, NOT_APPLICABLE, ReversibleMove
from .rulesets import ASSESSMENT, DECISION_OS, RuleSet, available_rule_sets, get_rule_set
from .schema import Answers, AnswerSchema, AnswerType, Question

__all__ = [
    "ASSESSMENT",
    "DECISION_OS",
    "MOVES_FOUND",
    "NO_WEAKNESSES",
    "NOT_APPLICABLE",
    "Answers",
    "AnswerSchema",
    "AnswerType",
    "IdentifierGenerator",
    "Question",
    "Result",
    "ReversibleMove",
    "RuleSet",
    "ScoreCard",
    "Scoring",
    "ScoringEngine",
    "available_rule_sets",
    "get_rule_set",
]
