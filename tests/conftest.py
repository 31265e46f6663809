"""
Pytest configuration and fixtures for Optionality OS tests.

Provides an in-memory database, an API client with the database dependency
overridden, and engines pinned to a fixed clock and random seed.
"""

import os

# must be set before optionality_os.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("RATE_LIMIT", "100000/minute")

import datetime
import random

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from optionality_os.main import app
from optionality_os.database import Base, get_db
from optionality_os import models
from optionality_os.engine import ASSESSMENT, DECISION_OS, IdentifierGenerator, ScoringEngine


# Test database setup
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

FIXED_NOW = datetime.datetime(2025, 2, 14, 9, 30, tzinfo=datetime.timezone.utc)


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    """
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """
    Create a test client with overridden database dependency.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def identifiers():
    """Identifier generator with a pinned clock and seed."""
    return IdentifierGenerator(clock=lambda: FIXED_NOW, rng=random.Random(7))


@pytest.fixture
def decision_engine(identifiers):
    return ScoringEngine(DECISION_OS, identifiers)


@pytest.fixture
def assessment_engine(identifiers):
    return ScoringEngine(ASSESSMENT, identifiers)


@pytest.fixture
def high_optionality_answers():
    return {
        "first_name": "jane",
        "email": "jane.doe@example.com",
        "idea_description": "Teach a weekend workshop",
        "upside": "Life-changing or career-defining",
        "effort": "Very low (days, minimal energy)",
        "multipliers": ["Leverage for future projects", "New skills"],
        "reversibility": "Fully reversible with little cost",
        "time_to_signal": "Days",
    }


@pytest.fixture
def trap_answers():
    return {
        "first_name": "Omar",
        "upside": "Small improvement only",
        "effort": "Extreme (long-term, consuming)",
        "multipliers": [],
        "reversibility": "Irreversible or reputation-locking",
        "time_to_signal": "A year or more",
    }


@pytest.fixture
def default_assessment_answers():
    return {
        "income_sources": 1,
        "income_concentration": 100,
        "currency_primary": "USD",
        "currency_count": 1,
        "jurisdiction_tax": "USA",
        "jurisdiction_income": "USA",
        "time_buffer": 3,
        "commitment_reversibility": "Medium",
        "leverage_debt": False,
        "leverage_guarantees": False,
    }


@pytest.fixture
def sample_option(db_session):
    """
    Create a sample portfolio option in the database.
    """
    option = models.PortfolioOption(
        title="Newsletter",
        description="Weekly essays",
        gain_potential=8,
        effort_cost=2,
        multiplier_effect=3,
        reversibility=9,
        category="project",
        status="active",
    )
    db_session.add(option)
    db_session.commit()
    db_session.refresh(option)
    return option
