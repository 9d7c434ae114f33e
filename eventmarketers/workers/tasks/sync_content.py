"""
Celery beat task: project approved, not-yet-synced content into the mobile catalog.
Overlapping runs are safe; the projection's unique source_id absorbs duplicates.
"""
import logging

from eventmarketers.core.celery_app import celery_app
from eventmarketers.db.session import SessionLocal
from eventmarketers.services.content_sync.service import ContentSyncService

logger = logging.getLogger(__name__)


@celery_app.task(
    name="eventmarketers.workers.tasks.sync_content.sync_approved_content",
    time_limit=600,
    soft_time_limit=570,
)
def sync_approved_content(kind: str | None = None) -> dict:
    db = SessionLocal()
    try:
        summary = ContentSyncService(db).sync_all(kind=kind)
        if summary.failed:
            logger.warning(
                "sync_approved_content_partial",
                extra={"succeeded": summary.succeeded, "failed": summary.failed},
            )
        return {"ok": True, **summary.model_dump(mode="json")}
    except Exception:
        logger.exception("sync_approved_content_error")
        db.rollback()
        return {"ok": False}
    finally:
        db.close()
