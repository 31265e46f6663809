from sqlalchemy.orm import Session
import datetime

from . import models
from .decorators import retry_on_db_lock


# --- Assessments ---

def get_assessment(db: Session, key: str):
    return db.query(models.AssessmentRecord).filter(models.AssessmentRecord.key == key).first()


@retry_on_db_lock()
def upsert_assessment(db: Session, key: str, rule_set: str, rule_set_version: str,
                      answers: dict, result: dict, classification, headline: float):
    record = get_assessment(db, key)
    if record is None:
        record = models.AssessmentRecord(key=key)
        db.add(record)
    record.rule_set = rule_set
    record.rule_set_version = rule_set_version
    record.answers = answers
    record.result = result
    record.classification = classification
    record.headline = headline
    db.commit()
    db.refresh(record)
    return record


# --- Portfolio ---

def get_option(db: Session, option_id: int):
    return db.query(models.PortfolioOption).filter(models.PortfolioOption.id == option_id).first()


def get_options(db: Session):
    return db.query(models.PortfolioOption).order_by(models.PortfolioOption.id.desc()).all()


@retry_on_db_lock()
def create_option(db: Session, **fields):
    db_option = models.PortfolioOption(**fields)
    db.add(db_option)
    db.commit()
    db.refresh(db_option)
    return db_option


@retry_on_db_lock()
def update_option_status(db: Session, db_option, status: str):
    db_option.status = status
    db_option.last_reviewed_at = datetime.datetime.utcnow()
    db.commit()
    db.refresh(db_option)
    return db_option


@retry_on_db_lock()
def mark_option_reviewed(db: Session, db_option):
    db_option.last_reviewed_at = datetime.datetime.utcnow()
    db.commit()
    db.refresh(db_option)
    return db_option


@retry_on_db_lock()
def replace_options(db: Session, rows: list):
    """Swap the whole portfolio for ``rows`` in one commit."""
    db.query(models.PortfolioOption).delete()
    db.add_all([models.PortfolioOption(**fields) for fields in rows])
    db.commit()
