import logging
import time
from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..database.connection import get_db
from ..inference.location import detect_location, UNAVAILABLE_MESSAGE
from ..utils.errors import ApiError
from ..utils.geocoder import GeocoderUnavailable
from ..utils.request_log import record_api_call

router = APIRouter()
logger = logging.getLogger(__name__)


def get_geocoder(request: Request):
    return request.app.state.geocoder


@router.get("/detect-location")
def detect(
    request: Request,
    lat: Optional[str] = None,
    lng: Optional[str] = None,
    db: Session = Depends(get_db),
    geocoder=Depends(get_geocoder)
):
    """
    Map coordinates to a seeded district. Geocoder failures never surface as
    errors: the caller gets `detected: false` and picks a district manually.
    """
    started = time.time()
    status = 200
    error_message = None

    try:
        return detect_location(db, geocoder, lat, lng)
    except ApiError as e:
        status = e.status_code
        error_message = e.message or e.error
        raise
    except GeocoderUnavailable as e:
        status = 500
        error_message = str(e)
        return {"detected": False, "message": UNAVAILABLE_MESSAGE}
    except Exception as e:
        # Logged as a failure even though the caller gets a 200 fallback
        status = 500
        error_message = str(e)
        logger.error(f"Error detecting location: {e}")
        return {"detected": False, "message": UNAVAILABLE_MESSAGE}
    finally:
        record_api_call(db, request, "/api/detect-location", status, started, error_message)
