import logging
import time
from typing import Optional

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..database.models import ApiLog

logger = logging.getLogger(__name__)


def record_api_call(db: Session, request: Request, endpoint: str, status: int,
                    started: float, error_message: Optional[str] = None):
    """
    Append one row to api_logs. A failed audit write is logged and never
    changes the response the caller gets.
    """
    # Drop anything left pending by a failed request before writing the log row
    db.rollback()
    try:
        db.add(ApiLog(
            endpoint=endpoint,
            ip_address=request.client.host if request.client else None,
            user_agent=request.headers.get("user-agent"),
            request_params=dict(request.query_params),
            response_status=status,
            response_time_ms=int((time.time() - started) * 1000),
            error_message=error_message[:500] if error_message else None,
        ))
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to record API call for {endpoint}: {e}")
