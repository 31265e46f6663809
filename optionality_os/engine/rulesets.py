"""
Rule-set configuration.

One engine, two rule sets. Everything that differs between the
"Decision-OS" questionnaire and the structural "Assessment" lives here as
data: questions, mapping tables, weights, constants, classification and
narrative rules, tier ladder, move and warning rules. The calculator
strategy is the only code each rule set points at.
"""

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from ..exceptions import ConfigurationException, UnknownRuleSetException
from .calculator import ScoreCard, assessment_scores, decision_os_scores
from .mapping import MappingTable, MappingTables, SaturatingScale
from .recommendations import MoveRule, ReversibleMove
from .rules import Band, Condition, Rule, all_of, any_of
from .schema import Answers, AnswerSchema, AnswerType, Question

DECISION_OS = "decision_os"
ASSESSMENT = "assessment"


@dataclass(frozen=True)
class RuleSet:
    name: str
    version: str
    title: str
    schema: AnswerSchema
    tables: MappingTables
    calculate: Callable[[Answers, "RuleSet"], ScoreCard]
    headline_metric: str
    weights: Mapping[str, float] = field(default_factory=dict)
    constants: Mapping[str, Any] = field(default_factory=dict)
    classification_rules: Tuple[Rule, ...] = ()
    narrative_rules: Tuple[Rule, ...] = ()
    narratives: Mapping[str, str] = field(default_factory=dict)
    tier_metric: Optional[str] = None
    tier_ladder: Tuple[Band, ...] = ()
    tier_floor: Optional[Band] = None
    move_rules: Tuple[MoveRule, ...] = ()
    warning_rules: Tuple[Rule, ...] = ()

    def __post_init__(self):
        for name in ("weights", "constants", "narratives"):
            object.__setattr__(self, name, MappingProxyType(dict(getattr(self, name))))
        if self.weights and not math.isclose(sum(self.weights.values()), 1.0, abs_tol=1e-9):
            raise ConfigurationException(
                f"Weights for rule set '{self.name}' sum to {sum(self.weights.values())}, expected 1.0",
                error_code="BAD_WEIGHTS",
            )
        if self.tier_ladder and self.tier_floor is None:
            raise ConfigurationException(
                f"Rule set '{self.name}' declares a tier ladder without a floor band",
                error_code="BAD_TIERS",
            )

    @property
    def has_tiers(self) -> bool:
        return bool(self.tier_ladder)

    def describe(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "title": self.title,
            "headline_metric": self.headline_metric,
            "has_classification": bool(self.classification_rules),
            "has_tiers": self.has_tiers,
        }


def _identity_questions():
    return (
        Question("first_name", AnswerType.IDENTITY, "First name", default="", step="identity"),
        Question("last_initial", AnswerType.IDENTITY, "Last initial", default="", step="identity"),
        Question("email", AnswerType.IDENTITY, "Email or contact ID", default="", step="identity"),
        Question("country", AnswerType.IDENTITY, "Country", default="", step="identity"),
        Question("city", AnswerType.IDENTITY, "City", default="", step="identity"),
        Question("locale", AnswerType.IDENTITY, "Locale", default="en", step="identity"),
    )


# ═══════════════════════════════════════════
# DECISION-OS
# ═══════════════════════════════════════════

UPSIDE_OPTIONS = (
    "Small improvement only",
    "Noticeable but capped benefit",
    "Significant upside",
    "Life-changing or career-defining",
)
EFFORT_OPTIONS = (
    "Very low (days, minimal energy)",
    "Moderate (weeks, manageable)",
    "High (months, focused effort)",
    "Extreme (long-term, consuming)",
)
MULTIPLIER_OPTIONS = (
    "New skills",
    "New relationships",
    "Public proof or reputation",
    "Leverage for future projects",
    "Direct cash flow",
    "Nothing beyond the outcome",
)
REVERSIBILITY_OPTIONS = (
    "Fully reversible with little cost",
    "Some cost but recoverable",
    "Hard to undo with meaningful loss",
    "Irreversible or reputation-locking",
)
TIME_TO_SIGNAL_OPTIONS = ("Days", "Weeks", "Months", "A year or more")

_decision_os_schema = AnswerSchema(
    name=DECISION_OS,
    questions=_identity_questions() + (
        Question("life_mode", AnswerType.SINGLE_CHOICE, "Life mode",
                 options=("Stable", "Building", "Transition", "Exploring"), step="context"),
        Question("primary_role", AnswerType.SINGLE_CHOICE, "Primary role",
                 options=("Employee", "Founder", "Freelancer", "Investor", "Student"), step="context"),
        Question("mobility_level", AnswerType.SINGLE_CHOICE, "Mobility level",
                 options=("Low", "Medium", "High"), default="Medium", step="context"),
        Question("risk_posture", AnswerType.SINGLE_CHOICE, "Risk posture",
                 options=("Conservative", "Balanced", "Aggressive"), step="context"),
        Question("idea_description", AnswerType.FREE_TEXT,
                 "Describe the idea, project, or decision you are considering", default=""),
        Question("upside", AnswerType.SINGLE_CHOICE,
                 "If this works unusually well, how big could the upside be?", options=UPSIDE_OPTIONS),
        Question("effort", AnswerType.SINGLE_CHOICE,
                 "How much sustained effort does this realistically require?", options=EFFORT_OPTIONS),
        Question("multipliers", AnswerType.MULTI_CHOICE,
                 "What does this create beyond the immediate outcome?", options=MULTIPLIER_OPTIONS, default=()),
        Question("reversibility", AnswerType.SINGLE_CHOICE,
                 "If this does not work, how easily can you walk away?", options=REVERSIBILITY_OPTIONS),
        Question("time_to_signal", AnswerType.SINGLE_CHOICE,
                 "How soon will you know if this is working?", options=TIME_TO_SIGNAL_OPTIONS),
    ),
)

_decision_os_tables = MappingTables(
    rule_set=DECISION_OS,
    tables={
        "gain": MappingTable("gain", dict(zip(UPSIDE_OPTIONS, (3, 5, 8, 10))), default=0),
        "effort": MappingTable("effort", dict(zip(EFFORT_OPTIONS, (2, 4, 7, 9))), default=1, floor=1),
        "reversibility": MappingTable("reversibility", dict(zip(REVERSIBILITY_OPTIONS, (9, 6, 3, 1))), default=1),
        "time_penalty": MappingTable("time_penalty", dict(zip(TIME_TO_SIGNAL_OPTIONS, (1.0, 0.9, 0.7, 0.5))), default=1.0),
        "multipliers": MappingTable("multipliers", dict(zip(MULTIPLIER_OPTIONS, (2, 2, 2, 3, 1, 0))), default=0),
        "mobility_bonus": MappingTable("mobility_bonus", {"High": 1.2}, default=1.0),
    },
)

HIGH_OPTIONALITY = "High Optionality"
OPTIMIZATION_TRAP = "Optimization Trap"
NEUTRAL = "Neutral"

DECISION_OS_RULES = RuleSet(
    name=DECISION_OS,
    version="2.0",
    title="Decision OS",
    schema=_decision_os_schema,
    tables=_decision_os_tables,
    calculate=decision_os_scores,
    headline_metric="effective_optionality",
    constants={
        "multiplier_cap": 10,
        "capability_per_tag": 2,
        "relationship_tag": "New relationships",
        "network_with_relationships": 8,
        "network_base": 4,
    },
    classification_rules=(
        Rule(HIGH_OPTIONALITY, all_of(
            Condition("effective_optionality", ">=", 12),
            Condition("reversibility", ">=", 6),
            Condition("effort", "<=", 5),
        )),
        Rule(OPTIMIZATION_TRAP, all_of(
            Condition("effort", ">=", 7),
            any_of(Condition("multiplier", "<=", 3), Condition("reversibility", "<=", 3)),
        )),
        Rule(NEUTRAL),
    ),
    narratives={
        HIGH_OPTIONALITY: "Double down carefully",
        OPTIMIZATION_TRAP: "Kill or shrink",
        NEUTRAL: "Proceed small",
    },
    tier_metric="pillar_total",
    tier_ladder=(
        Band(85, "A", "Sovereign"),
        Band(45, "B", "Strong"),
        Band(30, "C", "Developing"),
        Band(15, "D", "Exposed"),
    ),
    tier_floor=Band(float("-inf"), "E", "Fragile"),
    warning_rules=(
        Rule("High effort with low reversibility", all_of(
            Condition("effort", ">=", 7), Condition("reversibility", "<=", 3))),
        Rule("Low future optionality multiplier", Condition("multiplier", "<=", 3)),
        Rule("Effort outweighs upside", all_of(
            Condition("effort", ">=", 8), Condition("gain", "<=", 4))),
    ),
)


# ═══════════════════════════════════════════
# ASSESSMENT
# ═══════════════════════════════════════════

COMMITMENT_OPTIONS = ("Low", "Medium", "High")

_assessment_schema = AnswerSchema(
    name=ASSESSMENT,
    questions=_identity_questions() + (
        Question("income_sources", AnswerType.NUMERIC, "How many independent income sources do you have?",
                 minimum=0, maximum=20, default=1, integer=True),
        Question("income_concentration", AnswerType.PERCENTAGE,
                 "What share of income comes from your largest source (%)?", default=100),
        Question("currency_primary", AnswerType.FREE_TEXT, "Primary currency", default="USD"),
        Question("currency_count", AnswerType.NUMERIC, "In how many currencies do you earn or hold savings?",
                 minimum=0, maximum=20, default=1, integer=True),
        Question("jurisdiction_tax", AnswerType.FREE_TEXT, "Tax residency", default="USA"),
        Question("jurisdiction_income", AnswerType.FREE_TEXT, "Where is most income earned?", default="USA"),
        Question("time_buffer", AnswerType.NUMERIC, "Months of expenses covered by cash",
                 minimum=0, maximum=60, default=3),
        Question("commitment_reversibility", AnswerType.SINGLE_CHOICE,
                 "How reversible are your largest commitments?", options=COMMITMENT_OPTIONS, default="Medium"),
        Question("leverage_debt", AnswerType.BOOLEAN, "Does your structure rely on debt?", default=False),
        Question("leverage_guarantees", AnswerType.BOOLEAN, "Have you given personal guarantees?", default=False),
    ),
)

_assessment_tables = MappingTables(
    rule_set=ASSESSMENT,
    tables={
        "income_sources": SaturatingScale("income_sources", full_at=3),
        "currency_count": SaturatingScale("currency_count", full_at=3),
        "time_buffer": SaturatingScale("time_buffer", full_at=12),
        "jurisdiction_split": MappingTable("jurisdiction_split", {True: 100, False: 50}, default=50),
        "leverage_debt": MappingTable("leverage_debt", {True: -30, False: 0}, default=0),
        "leverage_guarantees": MappingTable("leverage_guarantees", {True: -20, False: 0}, default=0),
        "reversibility": MappingTable("reversibility", dict(zip(COMMITMENT_OPTIONS, (0, 50, 100))), default=50),
        "structural_adjustment": MappingTable("structural_adjustment", dict(zip(COMMITMENT_OPTIONS, (-15, 0, 10))), default=0),
    },
)

ASSESSMENT_RULES = RuleSet(
    name=ASSESSMENT,
    version="1.0",
    title="Structural Optionality Assessment",
    schema=_assessment_schema,
    tables=_assessment_tables,
    calculate=assessment_scores,
    headline_metric="total",
    weights={
        "income": 0.25,
        "currency": 0.15,
        "jurisdiction": 0.10,
        "time": 0.20,
        "leverage": 0.15,
        "reversibility": 0.15,
    },
    constants={
        "concentration_penalty_above": 80,
        "concentration_penalty": 20,
    },
    narrative_rules=(
        Rule("resilient", Condition("total", ">", 70)),
        Rule("fragile"),
    ),
    narratives={
        "resilient": (
            "Your structure already holds several independent options. Keep new "
            "commitments reversible and re-run this assessment twice a year."
        ),
        "fragile": (
            "Your structure rests on a few load-bearing assumptions. Work through the "
            "reversible moves below before taking on new commitments."
        ),
    },
    move_rules=(
        MoveRule("income_primary", Condition("income_concentration", ">", 70), (
            ReversibleMove("Income", "Run a 90-day side-income experiment with one new client or product",
                           "High", "Low"),
        )),
        MoveRule("income_secondary", all_of(
            Condition("income_concentration", ">", 50), Condition("income_concentration", "<=", 70)), (
            ReversibleMove("Income", "Convert one recurring project into a small monthly retainer",
                           "High", "Low"),
        )),
        MoveRule("currency", Condition("currency_count", "<", 2), (
            ReversibleMove("Currency", "Open a multi-currency account and hold one month of expenses in a second currency",
                           "High", "Low"),
        )),
        MoveRule("time_buffer", Condition("time_buffer", "<", 3), (
            ReversibleMove("Time", "Set up an automatic sweep of 10% of each payment into a separate buffer account",
                           "High", "Low"),
            ReversibleMove("Time", "Audit the last 90 days of spending and cancel one recurring cost",
                           "High", "Low"),
        )),
        MoveRule("leverage_debt", Condition("leverage_debt", "==", True), (
            ReversibleMove("Leverage", "Pause new borrowing for 90 days and list the exit cost of every loan",
                           "High", "Medium"),
        )),
    ),
)


_REGISTRY: Dict[str, RuleSet] = {
    DECISION_OS: DECISION_OS_RULES,
    ASSESSMENT: ASSESSMENT_RULES,
}


def available_rule_sets() -> Tuple[str, ...]:
    return tuple(_REGISTRY)


def get_rule_set(name: str) -> RuleSet:
    try:
        return _REGISTRY[name]
    except KeyError:
        raise UnknownRuleSetException(f"Unknown rule set: {name}", error_code="UNKNOWN_RULE_SET")
