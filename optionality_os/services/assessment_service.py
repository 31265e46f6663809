"""
Assessment Service

Hosts the scoring engine behind the request boundary: one request, one
pure computation, one response. Storage goes through ``AssessmentRepository``
so the engine never sees a database session.

Usage:
    from optionality_os.services.assessment_service import AssessmentService

    service = AssessmentService(SqlAssessmentRepository(db))
    result = service.score("decision_os", {"upside": "Significant upside", ...})
"""

import logging
import uuid
from abc import ABC, abstractmethod
from typing import Any, Dict, Mapping, Optional

from sqlalchemy.orm import Session

from .. import crud
from ..engine import Answers, IdentifierGenerator, Result, ScoringEngine, get_rule_set
from ..engine.export import dump_result, load_answers
from ..exceptions import AssessmentConflictException, RecordNotFoundException
from ..middleware.monitoring import instrument_assessment

logger = logging.getLogger(__name__)


class AssessmentRepository(ABC):
    """Storage boundary for answers and results."""

    @abstractmethod
    def load(self, key: str) -> Optional[Answers]:
        """Normalized answers stored under ``key``, or None."""

    @abstractmethod
    def load_result(self, key: str) -> Optional[Dict[str, Any]]:
        """The stored ``Result.to_dict()`` payload, or None."""

    @abstractmethod
    def save(self, key: str, result: Result) -> None:
        """Store answers and result under ``key``, replacing both."""


class SqlAssessmentRepository(AssessmentRepository):
    """SQLAlchemy-backed repository; one row per key."""

    def __init__(self, db: Session):
        self.db = db

    def load(self, key: str) -> Optional[Answers]:
        record = crud.get_assessment(self.db, key)
        if record is None:
            return None
        # re-normalize: stored JSON may predate the current schema
        return get_rule_set(record.rule_set).schema.normalize(record.answers)

    def load_result(self, key: str) -> Optional[Dict[str, Any]]:
        record = crud.get_assessment(self.db, key)
        return dict(record.result) if record is not None else None

    def save(self, key: str, result: Result) -> None:
        crud.upsert_assessment(
            self.db,
            key=key,
            rule_set=result.rule_set,
            rule_set_version=result.rule_set_version,
            answers=result.answers.as_dict(),
            result=result.to_dict(),
            classification=result.classification,
            headline=float(result.headline),
        )


class AssessmentService:

    def __init__(self, repository: AssessmentRepository, identifier_generator: Optional[IdentifierGenerator] = None):
        self.repository = repository
        self.identifiers = identifier_generator

    def engine(self, rule_set: str) -> ScoringEngine:
        return ScoringEngine(rule_set, self.identifiers)

    def score(self, rule_set: str, raw_answers: Mapping[str, Any]) -> Result:
        result = self.engine(rule_set).assess(raw_answers)
        instrument_assessment(result.rule_set, result.classification, float(result.headline))
        return result

    def save(self, rule_set: str, raw_answers: Mapping[str, Any], key: Optional[str] = None) -> Dict[str, Any]:
        result = self.score(rule_set, raw_answers)
        if key:
            stored = self.repository.load_result(key)
            if stored is not None and stored.get("rule_set") != result.rule_set:
                raise AssessmentConflictException(
                    f"Assessment '{key}' already holds a {stored.get('rule_set')} record",
                    error_code="ASSESSMENT_CONFLICT",
                )
        else:
            # client ids repeat for the same person on the same day
            key = f"{result.client_id}-{uuid.uuid4().hex[:6]}"
        self.repository.save(key, result)
        logger.info(f"Saved assessment {key} ({rule_set}, classification={result.classification})")
        return {"key": key, "result": result}

    def get_result(self, key: str) -> Dict[str, Any]:
        stored = self.repository.load_result(key)
        if stored is None:
            raise RecordNotFoundException(f"Assessment '{key}' not found", error_code="ASSESSMENT_NOT_FOUND")
        return stored

    def get_answers(self, key: str) -> Answers:
        answers = self.repository.load(key)
        if answers is None:
            raise RecordNotFoundException(f"Assessment '{key}' not found", error_code="ASSESSMENT_NOT_FOUND")
        return answers

    def rescore(self, key: str) -> Result:
        """Recompute a stored assessment from its answers with the current rules."""
        answers = self.get_answers(key)
        result = self.score(answers.rule_set, answers)
        self.repository.save(key, result)
        return result

    def export(self, key: str) -> str:
        return dump_result(self.get_result(key))

    def import_vault(self, rule_set: str, text: str) -> Result:
        get_rule_set(rule_set)
        raw = load_answers(text, expected_rule_set=rule_set)
        return self.score(rule_set, raw)
