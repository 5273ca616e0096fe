"""Celery application for background maintenance.

Run a worker with embedded beat:
    celery -A worker worker --beat --loglevel=info
"""

from celery import Celery

from config import get_settings
from observability.logging_config import configure_logging

settings = get_settings()

configure_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)

celery_app = Celery(
    "exam_extractor",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["shares.tasks"],
)

celery_app.conf.update(
    timezone="UTC",
    enable_utc=True,
    task_ignore_result=False,
    result_expires=3600,
)

celery_app.conf.beat_schedule = {
    'shares-sweep-expired': {
        'task': 'shares.sweep_expired',
        'schedule': float(settings.SHARE_SWEEP_INTERVAL_SECONDS),
        'options': {
            # A missed run is superseded by the next one
            'expires': float(settings.SHARE_SWEEP_INTERVAL_SECONDS),
        },
    },
}
