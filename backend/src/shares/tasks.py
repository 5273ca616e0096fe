"""Celery tasks for share store maintenance.

Tasks:
- shares.sweep_expired: periodic removal of expired share entries

Resolving never returns an expired entry whether or not this task runs; the
sweep only reclaims storage.
"""

import logging
import time
from typing import Any, Dict, Optional

from celery import shared_task
from sqlalchemy.exc import SQLAlchemyError

from config import get_settings
from .store import ShareStore

logger = logging.getLogger(__name__)

_task_store: Optional[ShareStore] = None


def get_task_store() -> ShareStore:
    """ShareStore for the worker process, opened on first use."""
    global _task_store
    if _task_store is None:
        settings = get_settings()
        _task_store = ShareStore.from_url(
            settings.DATABASE_URL,
            max_ttl_seconds=settings.SHARE_MAX_TTL_SECONDS,
        )
        _task_store.create_schema()
        # Seeds the shares_stored gauge for this process
        _task_store.count()
    return _task_store


def run_share_sweep(store: ShareStore) -> Dict[str, Any]:
    """Sweep expired entries and report what happened.

    Storage errors are logged and reported in the result rather than raised,
    so a failing run does not poison the beat schedule; the next run retries.
    """
    started = time.perf_counter()
    try:
        removed = store.sweep()
    except SQLAlchemyError as e:
        logger.error("Share sweep failed", exc_info=True)
        return {
            'status': 'failed',
            'error': str(e),
            'removed': 0,
        }

    return {
        'status': 'completed',
        'removed': removed,
        'duration_seconds': round(time.perf_counter() - started, 3),
    }


@shared_task(name="shares.sweep_expired")
def sweep_expired_shares_task() -> Dict[str, Any]:
    """Remove expired share entries.

    Idempotent: a second run in the same second removes nothing.
    Scheduled by the beat configuration in worker.py.
    """
    result = run_share_sweep(get_task_store())
    logger.info("Share sweep task finished", extra={"removed": result['removed']})
    return result
