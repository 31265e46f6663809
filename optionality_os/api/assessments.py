"""
Assessment API Routes

Exposes the scoring engine and the question catalogue to the wizard UI.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session
from typing import List

from .. import schemas
from ..config import settings
from ..database import get_db
from ..engine import available_rule_sets, get_rule_set
from ..services.assessment_service import AssessmentService, SqlAssessmentRepository

router = APIRouter(prefix="/api", tags=["assessments"])


def get_assessment_service(db: Session = Depends(get_db)) -> AssessmentService:
    return AssessmentService(SqlAssessmentRepository(db))


@router.get("/rule-sets", response_model=List[schemas.RuleSetInfo])
def list_rule_sets():
    """Rule sets the engine can score against."""
    return [get_rule_set(name).describe() for name in available_rule_sets()]


@router.get("/rule-sets/{name}/questions")
def get_questions(name: str):
    """Question catalogue (ids, domains, options, defaults) for building the wizard."""
    rule_set = get_rule_set(name)
    return {
        **rule_set.describe(),
        "questions": rule_set.schema.describe(),
        "mapping": rule_set.tables.as_dict(),
    }


@router.post("/assessments/score", response_model=schemas.AssessmentResult)
def score_default_assessment(data: schemas.AnswersIn,
                             service: AssessmentService = Depends(get_assessment_service)):
    """Score answers against the configured default rule set."""
    return service.score(settings.DEFAULT_RULE_SET, data.answers).to_dict()


@router.post("/assessments/{rule_set}/score", response_model=schemas.AssessmentResult)
def score_assessment(rule_set: str, data: schemas.AnswersIn,
                     service: AssessmentService = Depends(get_assessment_service)):
    """Score answers without storing anything."""
    return service.score(rule_set, data.answers).to_dict()


@router.post("/assessments/{rule_set}", response_model=schemas.SavedAssessment)
def save_assessment(rule_set: str, data: schemas.AnswersIn,
                    service: AssessmentService = Depends(get_assessment_service)):
    """Score answers and store answers + result under a key."""
    saved = service.save(rule_set, data.answers, key=data.key)
    return {"key": saved["key"], "result": saved["result"].to_dict()}


@router.post("/assessments/{rule_set}/import", response_model=schemas.AssessmentResult)
async def import_assessment(rule_set: str, request: Request,
                            service: AssessmentService = Depends(get_assessment_service)):
    """
    Score a previously exported vault (text/plain key=value body).
    Only the answers section is read; the result is always recomputed.
    """
    text = (await request.body()).decode("utf-8", errors="replace")
    return service.import_vault(rule_set, text).to_dict()


@router.get("/assessments/{key}", response_model=schemas.AssessmentResult)
def get_assessment(key: str, service: AssessmentService = Depends(get_assessment_service)):
    return service.get_result(key)


@router.get("/assessments/{key}/answers")
def get_assessment_answers(key: str, service: AssessmentService = Depends(get_assessment_service)):
    answers = service.get_answers(key)
    return {"key": key, "rule_set": answers.rule_set, "answers": answers.as_dict()}


@router.post("/assessments/{key}/rescore", response_model=schemas.AssessmentResult)
def rescore_assessment(key: str, service: AssessmentService = Depends(get_assessment_service)):
    """Recompute a stored assessment with the current rules and replace it."""
    return service.rescore(key).to_dict()


@router.get("/assessments/{key}/export", response_class=PlainTextResponse)
def export_assessment(key: str, service: AssessmentService = Depends(get_assessment_service)):
    """Download the stored answers and result as a key=value vault."""
    return PlainTextResponse(
        service.export(key),
        headers={"Content-Disposition": f'attachment; filename="{key}.opt"'},
    )
