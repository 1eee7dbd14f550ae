from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.core.db.session import get_db
from app.domain.real_world_assets.schemas.read import PortfolioDetailOut, PortfolioOut
from app.domain.real_world_assets.services.queries import get_portfolio_detail, list_portfolios
from app.shared.exceptions import NotFound


router = APIRouter(prefix="/drives/{drive_id}/portfolios", tags=["Portfolios"])


@router.get("", response_model=list[PortfolioOut])
def list_drive_portfolios(drive_id: str, db: Session = Depends(get_db)) -> list[PortfolioOut]:
    return [PortfolioOut.model_validate(p) for p in list_portfolios(db, drive_id=drive_id)]


@router.get("/{document_id}", response_model=PortfolioDetailOut)
def get_drive_portfolio(drive_id: str, document_id: str, db: Session = Depends(get_db)) -> PortfolioDetailOut:
    try:
        return get_portfolio_detail(db, drive_id=drive_id, document_id=document_id)
    except NotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
