from sqlalchemy import Column, Integer, String, Float, DateTime, JSON, Text
import datetime

# engine and SessionLocal are defined ONLY in database.py
from .database import Base


def _utcnow():
    return datetime.datetime.utcnow()


class AssessmentRecord(Base):
    """
    A saved assessment: the normalized answers and the result they produced.

    Results are never patched in place. Re-saving under the same key replaces
    both columns with a fresh computation.
    """
    __tablename__ = "assessments"
    id = Column(Integer, primary_key=True, index=True)
    key = Column(String, unique=True, index=True, nullable=False)  # explicit key, or client_id plus a random suffix
    rule_set = Column(String, index=True, nullable=False)
    rule_set_version = Column(String)
    answers = Column(JSON, default={})
    result = Column(JSON, default={})
    classification = Column(String, nullable=True, index=True)
    headline = Column(Float, default=0.0)
    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)


class PortfolioOption(Base):
    """
    One option in the user's standing portfolio.

    Killed options stay in the table for history but drop out of the
    portfolio score.
    """
    __tablename__ = "portfolio_options"
    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, default="")
    gain_potential = Column(Integer, default=5)
    effort_cost = Column(Integer, default=5)
    multiplier_effect = Column(Integer, default=1)
    reversibility = Column(Integer, default=5)
    category = Column(String, default="project")
    status = Column(String, default="active", index=True)  # active, killed
    created_at = Column(DateTime, default=_utcnow)
    last_reviewed_at = Column(DateTime, default=_utcnow)
