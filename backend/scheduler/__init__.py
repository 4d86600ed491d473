"""
Scheduler module for the daily synthetic data sync.
"""

from .sync_scheduler import (
    scheduler,
    start_scheduler,
    shutdown_scheduler,
    trigger_sync_now,
    run_synthetic_sync,
    is_sync_in_progress,
)

__all__ = [
    'scheduler',
    'start_scheduler',
    'shutdown_scheduler',
    'trigger_sync_now',
    'run_synthetic_sync',
    'is_sync_in_progress',
]
