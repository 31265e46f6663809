"""
Portfolio Service - standing options and their decayed portfolio score.

Options are stored rows; evaluation is delegated to the pure
``engine.portfolio`` module.
"""

import logging
import datetime
from typing import Any, Dict, Optional
from pydantic import ValidationError
from sqlalchemy.orm import Session

from .. import crud, schemas
from ..config import settings
from ..engine import portfolio
from ..engine.export import dump_portfolio, load_portfolio
from ..exceptions import RecordNotFoundException, VaultFormatException

logger = logging.getLogger(__name__)

VAULT_FIELDS = ("title", "description", "gain_potential", "effort_cost", "multiplier_effect", "reversibility",
                "category")


class PortfolioService:
    @staticmethod
    def serialize(option, now: datetime.datetime) -> Dict[str, Any]:
        evaluation = portfolio.evaluate_option(option)
        return {
            "id": option.id,
            "title": option.title,
            "description": option.description or "",
            "gain_potential": option.gain_potential,
            "effort_cost": option.effort_cost,
            "multiplier_effect": option.multiplier_effect,
            "reversibility": option.reversibility,
            "category": option.category,
            "status": option.status,
            "created_at": option.created_at.isoformat() if option.created_at else None,
            "last_reviewed_at": option.last_reviewed_at.isoformat() if option.last_reviewed_at else None,
            "gem": evaluation.gem,
            "classification": evaluation.classification,
            "warnings": list(evaluation.warnings),
            "decay": round(portfolio.decay_factor(
                option.last_reviewed_at, now, settings.PORTFOLIO_DECAY_DAYS, settings.PORTFOLIO_DECAY_FLOOR), 3),
        }

    @staticmethod
    def overview(db: Session, now: Optional[datetime.datetime] = None) -> Dict[str, Any]:
        """
        All options (newest first) with their evaluation and the portfolio score.
        """
        now = now or datetime.datetime.now(datetime.timezone.utc)
        options = crud.get_options(db)
        active = [o for o in options if o.status == portfolio.ACTIVE]
        return {
            "options": [PortfolioService.serialize(o, now) for o in options],
            "active_count": len(active),
            "killed_count": len(options) - len(active),
            "portfolio_score": portfolio.portfolio_score(
                options, now, settings.PORTFOLIO_DECAY_DAYS, settings.PORTFOLIO_DECAY_FLOOR),
        }

    @staticmethod
    def add(db: Session, fields: Dict[str, Any]) -> Dict[str, Any]:
        option = crud.create_option(db, status=portfolio.ACTIVE, **fields)
        logger.info(f"Portfolio option {option.id} added: {option.title}")
        return PortfolioService.serialize(option, datetime.datetime.now(datetime.timezone.utc))

    @staticmethod
    def _get(db: Session, option_id: int):
        option = crud.get_option(db, option_id)
        if option is None:
            raise RecordNotFoundException(f"Option {option_id} not found", error_code="OPTION_NOT_FOUND")
        return option

    @staticmethod
    def kill(db: Session, option_id: int) -> Dict[str, Any]:
        option = crud.update_option_status(db, PortfolioService._get(db, option_id), portfolio.KILLED)
        logger.info(f"Portfolio option {option_id} killed")
        return PortfolioService.serialize(option, datetime.datetime.now(datetime.timezone.utc))

    @staticmethod
    def review(db: Session, option_id: int) -> Dict[str, Any]:
        option = crud.mark_option_reviewed(db, PortfolioService._get(db, option_id))
        return PortfolioService.serialize(option, datetime.datetime.now(datetime.timezone.utc))

    @staticmethod
    def export(db: Session) -> str:
        """Dump every option, oldest first, so an import keeps the listing order."""
        rows = []
        for option in reversed(crud.get_options(db)):
            rows.append({
                **{field: getattr(option, field) for field in VAULT_FIELDS},
                "status": option.status,
                "created_at": option.created_at.isoformat() if option.created_at else None,
                "last_reviewed_at": option.last_reviewed_at.isoformat() if option.last_reviewed_at else None,
            })
        return dump_portfolio(rows)

    @staticmethod
    def import_vault(db: Session, text: str) -> Dict[str, Any]:
        """Replace the whole portfolio with the options in a vault."""
        rows = []
        for index, entry in enumerate(load_portfolio(text)):
            try:
                fields = schemas.PortfolioOptionCreate(
                    **{k: v for k, v in entry.items() if k in VAULT_FIELDS}).model_dump()
            except ValidationError as e:
                raise VaultFormatException(f"Option {index}: {e.errors()[0]['msg']}",
                                           error_code="VAULT_BAD_OPTION")
            status = entry.get("status") or portfolio.ACTIVE
            if status not in (portfolio.ACTIVE, portfolio.KILLED):
                raise VaultFormatException(f"Option {index}: unknown status '{status}'",
                                           error_code="VAULT_BAD_OPTION")
            fields["status"] = status
            fields["created_at"] = _parse_timestamp(entry.get("created_at"), index) or datetime.datetime.utcnow()
            fields["last_reviewed_at"] = _parse_timestamp(entry.get("last_reviewed_at"), index)
            rows.append(fields)

        crud.replace_options(db, rows)
        logger.info(f"Portfolio replaced from vault ({len(rows)} options)")
        return PortfolioService.overview(db)


def _parse_timestamp(value: Optional[str], index: int) -> Optional[datetime.datetime]:
    """ISO text to the naive UTC the columns hold; empty means never."""
    if not value:
        return None
    try:
        parsed = datetime.datetime.fromisoformat(value)
    except ValueError:
        raise VaultFormatException(f"Option {index}: bad timestamp '{value}'", error_code="VAULT_BAD_OPTION")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(datetime.timezone.utc).replace(tzinfo=None)
    return parsed
