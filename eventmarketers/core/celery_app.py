"""
Celery application: broker and result backend from settings.
Periodic jobs (payment sweep, subscription hygiene, mobile sync) live in
eventmarketers.workers.tasks and are driven by beat.
"""
from celery import Celery
from celery.schedules import crontab

from eventmarketers.core.config import settings

celery_app = Celery(
    "eventmarketers",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=[
        "eventmarketers.workers.tasks.expire_payments",
        "eventmarketers.workers.tasks.sync_content",
    ],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    task_track_started=True,
    task_time_limit=900,
    result_expires=86400,
    beat_schedule={
        "expire-pending-payments": {
            "task": "eventmarketers.workers.tasks.expire_payments.expire_pending_payments",
            "schedule": crontab(minute=f"*/{settings.payment_sweep_interval_minutes}"),
        },
        "expire-stale-subscriptions": {
            "task": "eventmarketers.workers.tasks.expire_payments.expire_stale_subscriptions",
            "schedule": crontab(minute=0),
        },
        "sync-approved-content": {
            "task": "eventmarketers.workers.tasks.sync_content.sync_approved_content",
            "schedule": crontab(minute=f"*/{settings.sync_interval_minutes}"),
        },
    },
)
