from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.db.session import get_db
from app.core.middleware.context import set_listener
from app.domain.real_world_assets.schemas.strands import StrandBatchIn, StrandBatchOut
from app.domain.real_world_assets.services.projector import Projector, apply_strands_atomically
from app.shared.exceptions import MissingTargetRow, StoreTransactionFailure, StrandApplicationError, ValidationError


router = APIRouter(prefix="/listeners/{listener_id}/strands", tags=["Strands"])


def get_projector() -> Projector:
    return Projector()


@router.post("", response_model=StrandBatchOut, status_code=status.HTTP_200_OK)
def transmit_strands(
    listener_id: str,
    payload: StrandBatchIn,
    db: Session = Depends(get_db),
    projector: Projector = Depends(get_projector),
) -> StrandBatchOut:
    if listener_id != settings.rwa_listener_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown listener {listener_id}")
    set_listener(listener_id)

    try:
        result = apply_strands_atomically(projector, payload.strands, db)
    except StrandApplicationError as exc:
        if isinstance(exc.cause, MissingTargetRow):
            code = status.HTTP_409_CONFLICT
        elif isinstance(exc.cause, ValidationError):
            code = status.HTTP_422_UNPROCESSABLE_ENTITY
        elif isinstance(exc.cause, StoreTransactionFailure):
            code = status.HTTP_503_SERVICE_UNAVAILABLE
        else:
            code = status.HTTP_500_INTERNAL_SERVER_ERROR
        raise HTTPException(status_code=code, detail=str(exc)) from exc

    return StrandBatchOut(applied=result.applied, skipped=result.skipped)
