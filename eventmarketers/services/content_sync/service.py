"""
ContentSyncService: publishes approved content items into the mobile catalog.

Two guards, different jobs:
- UNIQUE(mobile_projections.source_id) is the exactly-once guard. A duplicate
  insert (concurrent worker, retry after a crash) is a no-op success that
  returns the existing projection.
- content_items.is_mobile_synced only keeps already-projected items out of the
  next scan.

Each item is handled in its own transaction: projection insert and flag update
commit together or not at all.
"""
import logging
import time
from datetime import datetime

from sqlalchemy import and_, func, insert, or_, update
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from eventmarketers.core.config import Settings, settings as default_settings
from eventmarketers.core.errors import (
    DomainError,
    NotFoundError,
    StateConflictError,
    TransientStorageError,
    ValidationError,
)
from eventmarketers.db.session import storage_call
from eventmarketers.models.content_item import ContentItem
from eventmarketers.models.enums import ApprovalStatus, ContentKind, coerce
from eventmarketers.models.mobile_projection import MobileProjection
from eventmarketers.schemas.content_sync import (
    KindSyncStatus,
    ProjectionCounts,
    SyncError,
    SyncStatus,
    SyncSummary,
)
from eventmarketers.services.content_sync.mapping import build_projection_values
from eventmarketers.utils.clock import utcnow
from eventmarketers.utils.metrics import content_sync_items_total, sync_batch_duration_seconds

logger = logging.getLogger(__name__)


def _pending_sync_filter():
    return and_(
        ContentItem.approval_status == ApprovalStatus.APPROVED.value,
        ContentItem.is_active.is_(True),
        ContentItem.is_mobile_synced.is_(False),
    )


class ContentSyncService:
    def __init__(self, db: Session, config: Settings | None = None):
        self.db = db
        self.settings = config or default_settings

    # ------------------------------------------------------------------
    # Sync
    # ------------------------------------------------------------------

    @storage_call
    def sync_all(self, kind: str | None = None, now: datetime | None = None) -> SyncSummary:
        """
        Project every approved, active, not-yet-synced item. No ordering guarantee.

        Candidates are read in keyset pages of ``sync_batch_limit`` on
        (created_at, id). The cursor only moves forward, so an item that fails
        is not picked up again within the same run.
        """
        started = time.monotonic()
        kind_value = self._parse_kind(kind).value if kind else None
        summary = SyncSummary()
        cursor = None
        while True:
            page = self._candidate_page(kind_value, cursor)
            # Release the read transaction before per-item work.
            self.db.commit()
            if not page:
                break
            cursor = (page[-1].created_at, page[-1].id)
            summary.total += len(page)
            for content_id, content_kind, _ in page:
                self._sync_candidate(content_id, content_kind, now, summary)

        sync_batch_duration_seconds.observe(time.monotonic() - started)
        logger.info(
            "content_sync_completed",
            extra={"succeeded": summary.succeeded, "failed": summary.failed},
        )
        return summary

    def _candidate_page(self, kind_value: str | None, cursor: tuple | None) -> list:
        q = self.db.query(ContentItem.id, ContentItem.kind, ContentItem.created_at).filter(
            _pending_sync_filter()
        )
        if kind_value:
            q = q.filter(ContentItem.kind == kind_value)
        if cursor is not None:
            created_at, last_id = cursor
            q = q.filter(
                or_(
                    ContentItem.created_at > created_at,
                    and_(ContentItem.created_at == created_at, ContentItem.id > last_id),
                )
            )
        return (
            q.order_by(ContentItem.created_at, ContentItem.id)
            .limit(self.settings.sync_batch_limit)
            .all()
        )

    def _sync_candidate(
        self, content_id: str, content_kind: str, now: datetime | None, summary: SyncSummary
    ) -> None:
        try:
            _, created = self._sync_item(content_id, now or utcnow())
        except (TransientStorageError, OperationalError):
            raise
        except (DomainError, SQLAlchemyError) as exc:
            self.db.rollback()
            reason = exc.message if isinstance(exc, DomainError) else str(getattr(exc, "orig", None) or exc)
            summary.failed += 1
            summary.errors.append(SyncError(id=content_id, reason=reason))
            content_sync_items_total.labels(kind=content_kind, result="failed").inc()
            logger.warning(
                "content_sync_item_failed",
                extra={"content_id": content_id, "error": reason},
            )
            return
        summary.succeeded += 1
        if created:
            summary.created += 1

    @storage_call
    def sync_one(self, content_id: str, now: datetime | None = None) -> MobileProjection:
        """Project a single item; returns the existing projection if it is already there."""
        projection, _ = self._sync_item(content_id, now or utcnow())
        return projection

    def _sync_item(self, content_id: str, now: datetime) -> tuple[MobileProjection, bool]:
        item = self.db.query(ContentItem).filter(ContentItem.id == content_id).one_or_none()
        if item is None:
            raise NotFoundError(f"Content item {content_id} not found")
        if item.approval_status != ApprovalStatus.APPROVED.value:
            raise StateConflictError(f"Content item {content_id} is not approved for sync")
        if not item.is_active:
            raise StateConflictError(f"Content item {content_id} is not active")

        values = build_projection_values(item, self.settings.projection_default_language, now)
        kind = values["kind"]

        created = True
        try:
            self.db.execute(insert(MobileProjection).values(**values))
        except IntegrityError:
            self.db.rollback()
            created = False

        projection = self.get_projection(content_id)
        if projection is None:
            raise ValidationError(f"Projection for {content_id} was rejected by storage")

        self.db.execute(
            update(ContentItem)
            .where(ContentItem.id == content_id, ContentItem.is_mobile_synced.is_(False))
            .values(
                is_mobile_synced=True,
                mobile_sync_at=now,
                mobile_projection_id=projection.id,
            )
            .execution_options(synchronize_session=False)
        )
        self.db.commit()

        content_sync_items_total.labels(kind=kind, result="created" if created else "existing").inc()
        logger.info(
            "content_synced" if created else "content_sync_existing",
            extra={"content_id": content_id, "projection_id": projection.id},
        )
        return projection, created

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_projection(self, content_id: str) -> MobileProjection | None:
        return (
            self.db.query(MobileProjection)
            .filter(MobileProjection.source_id == content_id)
            .one_or_none()
        )

    @storage_call
    def list_pending_sync(self, kind: str | None = None) -> list[ContentItem]:
        q = self.db.query(ContentItem).filter(_pending_sync_filter())
        if kind:
            q = q.filter(ContentItem.kind == self._parse_kind(kind).value)
        return q.order_by(ContentItem.created_at, ContentItem.id).all()

    @storage_call
    def sync_status(self) -> SyncStatus:
        """Per-kind sync progress and projection counts."""
        return SyncStatus(
            images=self._kind_status(ContentKind.IMAGE),
            videos=self._kind_status(ContentKind.VIDEO),
            mobile=ProjectionCounts(
                templates=self._count_projections(ContentKind.IMAGE),
                videos=self._count_projections(ContentKind.VIDEO),
            ),
        )

    def _kind_status(self, kind: ContentKind) -> KindSyncStatus:
        base = self.db.query(func.count(ContentItem.id)).filter(ContentItem.kind == kind.value)
        total = base.scalar() or 0
        synced = base.filter(ContentItem.is_mobile_synced.is_(True)).scalar() or 0
        pending = base.filter(_pending_sync_filter()).scalar() or 0
        return KindSyncStatus(
            total=total,
            synced=synced,
            pending=pending,
            sync_percentage=round(synced / total * 100) if total > 0 else 0,
        )

    def _count_projections(self, kind: ContentKind) -> int:
        return (
            self.db.query(func.count(MobileProjection.id))
            .filter(MobileProjection.kind == kind.value)
            .scalar()
            or 0
        )

    @staticmethod
    def _parse_kind(kind: str) -> ContentKind:
        try:
            return coerce(ContentKind, kind)
        except ValueError:
            raise ValidationError(f"Unknown content kind: {kind}") from None
