import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from feedback_bank.core.database import get_db
from feedback_bank.models.schemas import SiteLockResponse, SiteLockUpdate
from feedback_bank.services import site_settings as store

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("", response_model=SiteLockResponse)
def get_site_lock(db: Session = Depends(get_db)):
    try:
        return SiteLockResponse(locked=store.is_locked(db), lock_timestamp=store.lock_timestamp(db))
    except SQLAlchemyError as e:
        logger.error(f"Error fetching site lock status: {e}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "message": str(e) or "Unable to fetch site lock status", "locked": False},
        )

@router.post("", response_model=SiteLockResponse)
def set_site_lock(payload: SiteLockUpdate, db: Session = Depends(get_db)):
    try:
        stamp = store.set_locked(db, payload.locked)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error toggling site lock: {e}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "message": str(e) or "Unable to toggle site lock"},
        )
    return SiteLockResponse(locked=payload.locked, lock_timestamp=stamp)
