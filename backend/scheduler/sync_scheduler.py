"""
Automated Sync Scheduler
Runs the daily synthetic data sync and records every run in sync_logs.
"""

import atexit
import fcntl
import logging
import os
import threading
from datetime import datetime

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from pytz import timezone as pytz_timezone

from ..config import settings
from ..database.models import SyncLog
from ..helpers.synthetic_data import SyntheticDataGenerator

logger = logging.getLogger(__name__)

SYNC_TYPE = "synthetic"

SCHEDULER_TZ = pytz_timezone(settings.SCHEDULER_TIMEZONE)

scheduler = BackgroundScheduler(timezone=SCHEDULER_TZ)

# Prevents the scheduled job and a manual trigger from running at the same time
_sync_lock = threading.Lock()
_sync_in_progress = False
_lock_file_handle = None


def is_sync_in_progress() -> bool:
    return _sync_in_progress


def run_synthetic_sync(database, generator: SyntheticDataGenerator = None) -> dict:
    """
    Generate the target month's placeholder figures for every district.
    Returns a summary; a concurrent run is skipped with status "skipped".
    """
    if not _sync_lock.acquire(blocking=False):
        logger.warning("⚠️ Sync already in progress - skipping this trigger")
        return {"status": "skipped", "records_processed": 0}
    return _run_holding_lock(database, generator)


def _run_holding_lock(database, generator: SyntheticDataGenerator = None) -> dict:
    """Body of a sync run. The caller must hold `_sync_lock`; it is released here."""
    global _sync_in_progress

    _sync_in_progress = True
    logger.info("=" * 70)
    logger.info("🔄 SYNTHETIC DATA SYNC STARTED")
    logger.info(f"⏰ Time: {datetime.now(SCHEDULER_TZ)}")
    logger.info("=" * 70)

    db = None
    try:
        generator = generator or SyntheticDataGenerator(database)
        db = database.session()
        sync_log = SyncLog(sync_type=SYNC_TYPE, status="started", started_at=datetime.now())
        db.add(sync_log)
        db.commit()

        try:
            result = generator.initialize()
        except Exception as e:
            db.rollback()
            sync_log.status = "failed"
            sync_log.error_message = str(e)[:500]
            sync_log.completed_at = datetime.now()
            db.commit()
            logger.error(f"❌ Sync failed: {e}")
            return {"status": "failed", "records_processed": 0, "error": str(e)}

        processed = result["districts_inserted"] + result["performance_inserted"]
        sync_log.status = "success"
        sync_log.records_processed = processed
        sync_log.completed_at = datetime.now()
        db.commit()

        logger.info(f"✅ Sync complete: {processed} records written")
        logger.info("=" * 70)
        return {"status": "success", "records_processed": processed}
    finally:
        if db is not None:
            db.close()
        _sync_in_progress = False
        _sync_lock.release()
        logger.info("🔓 Sync lock released")


def _acquire_process_lock(lock_file_path: str) -> bool:
    """Only one worker process may own the scheduler; the lock file holds its PID."""
    global _lock_file_handle

    try:
        # os.open with O_CREAT | O_RDWR creates without truncating another worker's PID
        fd = os.open(lock_file_path, os.O_CREAT | os.O_RDWR, 0o644)
        handle = os.fdopen(fd, 'r+')
        fcntl.flock(handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
    except (IOError, OSError):
        logger.info("⏭️  Scheduler locked by another worker - skipping")
        return False

    handle.seek(0)
    handle.truncate()
    handle.write(str(os.getpid()))
    handle.flush()
    _lock_file_handle = handle
    atexit.register(_release_process_lock, lock_file_path)
    return True


def _release_process_lock(lock_file_path: str):
    global _lock_file_handle

    if _lock_file_handle is None:
        return
    try:
        fcntl.flock(_lock_file_handle.fileno(), fcntl.LOCK_UN)
        _lock_file_handle.close()
        if os.path.exists(lock_file_path):
            os.remove(lock_file_path)
    except OSError as e:
        logger.warning(f"Lock cleanup warning: {e}")
    _lock_file_handle = None


def start_scheduler(database, lock_file_path: str = None) -> bool:
    """
    Start the scheduler with the daily sync job.
    Called on application startup. Returns False when another worker owns it.
    """
    lock_file_path = lock_file_path or settings.SCHEDULER_LOCK_FILE
    if scheduler.running:
        return True
    if not _acquire_process_lock(lock_file_path):
        return False

    logger.info("=" * 70)
    logger.info("🚀 INITIALIZING SYNC SCHEDULER (Primary Instance)")
    logger.info(f"   PID: {os.getpid()} | Lock: {lock_file_path}")
    logger.info(f"⏰ Schedule: '{settings.SYNC_SCHEDULE}' ({settings.SCHEDULER_TIMEZONE})")
    logger.info("=" * 70)

    scheduler.add_job(
        run_synthetic_sync,
        trigger=CronTrigger.from_crontab(settings.SYNC_SCHEDULE, timezone=SCHEDULER_TZ),
        args=[database],
        id='daily_sync',
        name=f'Daily Synthetic Data Sync ({settings.SYNC_SCHEDULE})',
        replace_existing=True,
        max_instances=1,  # Only one instance can run at a time
        coalesce=True,  # If missed, run once (don't queue multiple)
        misfire_grace_time=3600  # Allow 1 hour grace for missed jobs
    )
    scheduler.start()

    logger.info("✅ Scheduler started successfully")
    for job in scheduler.get_jobs():
        logger.info(f"  • {job.name} | next run: {job.next_run_time}")
    return True


def shutdown_scheduler(lock_file_path: str = None):
    """
    Gracefully shutdown the scheduler.
    Called on application shutdown.
    """
    if scheduler.running:
        logger.info("🛑 Shutting down scheduler...")
        scheduler.shutdown(wait=True)
        logger.info("✅ Scheduler shutdown complete")
    _release_process_lock(lock_file_path or settings.SCHEDULER_LOCK_FILE)


def trigger_sync_now(database, generator: SyntheticDataGenerator = None) -> threading.Thread:
    """
    Manually trigger a sync immediately (runs in a background thread).

    The sync lock is taken before the thread starts and handed to it.

    Raises:
        RuntimeError: if a sync run already holds the lock
    """
    if not _sync_lock.acquire(blocking=False):
        raise RuntimeError("Sync job is already running. Check logs for progress.")

    logger.info("🔧 Manual sync trigger requested - starting background sync")
    thread = threading.Thread(
        target=_run_holding_lock, args=(database, generator), name="manual-sync", daemon=True
    )
    try:
        thread.start()
    except RuntimeError:
        _sync_lock.release()
        raise
    return thread
