from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from datetime import datetime

from .engine.portfolio import CATEGORIES


class AnswersIn(BaseModel):
    """Raw wizard answers; the rule set's schema normalizes them."""
    answers: Dict[str, Any] = Field(default_factory=dict)
    key: Optional[str] = Field(default=None, max_length=64, description="Storage key (defaults to the client id)")


class ReversibleMove(BaseModel):
    area: str
    option: str
    reversibility: str
    risk: str


class ScoreBreakdown(BaseModel):
    components: Dict[str, float]
    composites: Dict[str, float]
    pillars: Dict[str, float] = {}


class AssessmentResult(BaseModel):
    rule_set: str
    rule_set_version: str
    client_id: str
    identity: Dict[str, Any] = {}
    notes: Dict[str, Any] = {}
    answers: Dict[str, Any] = {}
    scores: ScoreBreakdown
    headline_metric: str
    headline: float
    classification: Optional[str] = None
    tier: Optional[str] = None
    tier_name: Optional[str] = None
    narrative: str = ""
    moves: List[ReversibleMove] = []
    moves_status: str
    warnings: List[str] = []


class SavedAssessment(BaseModel):
    key: str
    result: AssessmentResult


class RuleSetInfo(BaseModel):
    name: str
    version: str
    title: str
    headline_metric: str
    has_classification: bool
    has_tiers: bool


class PortfolioOptionCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    gain_potential: int = Field(default=5, ge=1, le=10)
    effort_cost: int = Field(default=5, ge=1, le=10)
    multiplier_effect: int = Field(default=1, ge=0, le=10)
    reversibility: int = Field(default=5, ge=1, le=10)
    category: str = Field(default="project", pattern="^(" + "|".join(CATEGORIES) + ")$")


class PortfolioOption(BaseModel):
    id: int
    title: str
    description: str
    gain_potential: int
    effort_cost: int
    multiplier_effect: int
    reversibility: int
    category: str
    status: str
    created_at: Optional[datetime] = None
    last_reviewed_at: Optional[datetime] = None
    gem: float
    classification: str
    warnings: List[str] = []
    decay: float


class PortfolioOverview(BaseModel):
    options: List[PortfolioOption]
    active_count: int
    killed_count: int
    portfolio_score: float
