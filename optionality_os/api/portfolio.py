"""
Portfolio API Routes

Standing options the user keeps alive, with GEM evaluation and decay.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from .. import schemas
from ..database import get_db
from ..services.portfolio_service import PortfolioService

router = APIRouter(prefix="/api/portfolio", tags=["portfolio"])


@router.get("", response_model=schemas.PortfolioOverview)
def get_portfolio(db: Session = Depends(get_db)):
    return PortfolioService.overview(db)


@router.post("", response_model=schemas.PortfolioOption)
def add_option(data: schemas.PortfolioOptionCreate, db: Session = Depends(get_db)):
    return PortfolioService.add(db, data.model_dump())


@router.post("/{option_id}/kill", response_model=schemas.PortfolioOption)
def kill_option(option_id: int, db: Session = Depends(get_db)):
    """Killed options keep their history but leave the portfolio score."""
    return PortfolioService.kill(db, option_id)


@router.post("/{option_id}/review", response_model=schemas.PortfolioOption)
def review_option(option_id: int, db: Session = Depends(get_db)):
    """Mark an option as reviewed today, resetting its decay."""
    return PortfolioService.review(db, option_id)


@router.get("/export", response_class=PlainTextResponse)
def export_portfolio(db: Session = Depends(get_db)):
    """Download every option, killed ones included, as a key=value vault."""
    return PlainTextResponse(
        PortfolioService.export(db),
        headers={"Content-Disposition": 'attachment; filename="portfolio.opt"'},
    )


@router.post("/import", response_model=schemas.PortfolioOverview)
async def import_portfolio(request: Request, db: Session = Depends(get_db)):
    """Replace the portfolio with a previously exported vault (text/plain body)."""
    text = (await request.body()).decode("utf-8", errors="replace")
    return PortfolioService.import_vault(db, text)
