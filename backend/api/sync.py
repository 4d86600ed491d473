import logging

from fastapi import APIRouter, Request
from pydantic import BaseModel

from ..scheduler.sync_scheduler import trigger_sync_now
from ..utils.errors import ApiError, ConflictError

# Initialize Router and Logger
router = APIRouter()
logger = logging.getLogger(__name__)


class TriggerResponse(BaseModel):
    status: str
    message: str


@router.post("/sync-data", response_model=TriggerResponse, status_code=202)
def sync_data(request: Request):
    """
    Start a data sync in the background and return immediately.

    The sync is the synthetic data generator (no external government feed is
    contacted); it fills in the target month for any district missing it.
    """
    try:
        logger.info("📞 Manual sync trigger requested via API")
        trigger_sync_now(request.app.state.database)
    except RuntimeError as e:
        # Sync already in progress
        raise ConflictError(error="Sync already in progress", message=str(e))
    except Exception as e:
        logger.error(f"Failed to trigger sync: {e}")
        raise ApiError(message=str(e)) from e

    return TriggerResponse(
        status="triggered",
        message="Synthetic data sync started in background. Check sync logs for progress."
    )
