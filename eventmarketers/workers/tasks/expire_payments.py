"""
Celery beat tasks: flip PENDING payment requests past expires_at to EXPIRED,
and stored ACTIVE subscriptions past end_date to EXPIRED.
"""
import logging

from eventmarketers.core.celery_app import celery_app
from eventmarketers.db.session import SessionLocal
from eventmarketers.services.payments.sweeper import PaymentSweeper

logger = logging.getLogger(__name__)


@celery_app.task(
    name="eventmarketers.workers.tasks.expire_payments.expire_pending_payments",
    time_limit=60,
    soft_time_limit=55,
)
def expire_pending_payments() -> dict:
    db = SessionLocal()
    try:
        expired = PaymentSweeper(db).expire_pending()
        return {"ok": True, "expired_count": expired}
    except Exception:
        logger.exception("expire_pending_payments_error")
        db.rollback()
        return {"ok": False}
    finally:
        db.close()


@celery_app.task(
    name="eventmarketers.workers.tasks.expire_payments.expire_stale_subscriptions",
    time_limit=60,
    soft_time_limit=55,
)
def expire_stale_subscriptions() -> dict:
    db = SessionLocal()
    try:
        expired = PaymentSweeper(db).expire_stale_subscriptions()
        return {"ok": True, "expired_count": expired}
    except Exception:
        logger.exception("expire_stale_subscriptions_error")
        db.rollback()
        return {"ok": False}
    finally:
        db.close()
