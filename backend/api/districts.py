import logging
import time
from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..config import settings
from ..database.connection import get_db
from ..database.models import District
from ..inference.metrics import get_district_data
from ..utils.errors import ApiError, BadRequestError
from ..utils.request_log import record_api_call

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/district-data")
def district_data(
    request: Request,
    state: Optional[str] = None,
    district: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """
    Latest metrics for one district compared with last month, last year and
    the state average. Every call is recorded in api_logs.
    """
    started = time.time()
    status = 200
    error_message = None

    try:
        if not state or not district:
            raise BadRequestError(error="State and district parameters are required")
        return get_district_data(db, state, district)
    except ApiError as e:
        status = e.status_code
        error_message = e.message or e.error
        raise
    except Exception as e:
        status = 500
        error_message = str(e)
        logger.error(f"Error fetching district data: {e}")
        raise ApiError(message=str(e)) from e
    finally:
        record_api_call(db, request, "/api/district-data", status, started, error_message)


@router.get("/states")
def list_states(db: Session = Depends(get_db)):
    rows = db.query(District.state_code, District.state_name) \
        .group_by(District.state_code, District.state_name) \
        .order_by(District.state_name) \
        .all()

    # Only one state is seeded; fall back to it if seeding has not run
    if not rows:
        return [{"stateCode": settings.SUPPORTED_STATE_CODE, "stateName": settings.SUPPORTED_STATE_NAME}]
    return [{"stateCode": code, "stateName": name} for code, name in rows]


@router.get("/districts")
def list_districts(state: Optional[str] = None, db: Session = Depends(get_db)):
    if not state:
        raise BadRequestError(error="State parameter is required")

    rows = db.query(District.district_name) \
        .filter(District.state_code == state) \
        .order_by(District.district_name) \
        .all()
    return [name for (name,) in rows]
