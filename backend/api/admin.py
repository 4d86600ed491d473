"""
Admin endpoints for scheduler inspection and sync history.
"""

import logging
import os

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..config import settings
from ..database.connection import get_db
from ..database.models import SyncLog
from ..scheduler.sync_scheduler import scheduler, is_sync_in_progress

router = APIRouter()
logger = logging.getLogger(__name__)


def _lock_owner_pid():
    """PID of the worker holding the scheduler lock, if that process is alive."""
    if not os.path.exists(settings.SCHEDULER_LOCK_FILE):
        return None
    try:
        with open(settings.SCHEDULER_LOCK_FILE, 'r') as f:
            pid = int(f.read().strip())
        os.kill(pid, 0)  # Check if process exists
        return pid
    except (ValueError, OSError):
        return None


@router.get("/scheduler-status")
def get_scheduler_status():
    """
    Current scheduler status and upcoming jobs.
    Jobs are only visible on the worker that owns the scheduler.
    """
    local_running = scheduler.running
    scheduler_pid = os.getpid() if local_running else _lock_owner_pid()

    jobs = []
    if local_running:
        for job in scheduler.get_jobs():
            jobs.append({
                "id": job.id,
                "name": job.name,
                "next_run_time": str(job.next_run_time) if job.next_run_time else None,
                "trigger": str(job.trigger)
            })

    return {
        "status": "running" if scheduler_pid else "stopped",
        "sync_in_progress": is_sync_in_progress(),
        "scheduler_pid": scheduler_pid,
        "this_worker_is_scheduler": local_running,
        "scheduled_jobs": jobs,
        "job_count": len(jobs)
    }


@router.get("/sync-logs")
def get_sync_logs(limit: int = Query(20, ge=1, le=200), db: Session = Depends(get_db)):
    """Most recent sync runs, newest first."""
    rows = db.query(SyncLog).order_by(SyncLog.id.desc()).limit(limit).all()
    return [
        {
            "id": row.id,
            "syncType": row.sync_type,
            "status": row.status,
            "recordsProcessed": row.records_processed,
            "errorMessage": row.error_message,
            "startedAt": row.started_at.isoformat() if row.started_at else None,
            "completedAt": row.completed_at.isoformat() if row.completed_at else None,
        }
        for row in rows
    ]
