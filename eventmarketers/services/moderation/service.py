"""
ModerationService: PENDING -> APPROVED | REJECTED, both terminal.

Every transition is one conditional UPDATE guarded by approval_status = 'PENDING',
so two racing moderators cannot both win. Moderation never triggers sync:
the projector pulls approved items on its own schedule.
"""
import logging
from datetime import datetime

from sqlalchemy import update
from sqlalchemy.orm import Session

from eventmarketers.core.config import Settings, settings as default_settings
from eventmarketers.core.errors import (
    AuthorizationError,
    NotFoundError,
    StateConflictError,
    ValidationError,
)
from eventmarketers.db.session import storage_call
from eventmarketers.models.content_item import ContentItem
from eventmarketers.models.enums import MODERATION_TARGETS, ApprovalStatus, ContentKind, coerce
from eventmarketers.services.audit.service import AuditService
from eventmarketers.utils.clock import utcnow
from eventmarketers.utils.metrics import content_moderated_total

logger = logging.getLogger(__name__)


class ModerationService:
    def __init__(self, db: Session, config: Settings | None = None):
        self.db = db
        self.settings = config or default_settings
        self.audit = AuditService(db)

    # ------------------------------------------------------------------
    # Guards
    # ------------------------------------------------------------------

    def _require_moderator(self, actor_role: str | None) -> None:
        if not actor_role or actor_role.upper() not in self.settings.moderator_roles_set:
            raise AuthorizationError("Only moderators can approve or reject content")

    def _parse_target(self, target_state: str) -> ApprovalStatus:
        try:
            target = coerce(ApprovalStatus, target_state)
        except ValueError:
            raise ValidationError(f"Unknown approval status: {target_state}") from None
        if target not in MODERATION_TARGETS:
            raise ValidationError("Status must be APPROVED or REJECTED")
        return target

    def _check_reason(self, reason: str | None) -> None:
        if reason and len(reason) > self.settings.moderation_reason_max_length:
            raise ValidationError("Reason too long")

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    @storage_call
    def transition(
        self,
        content_id: str,
        target_state: str,
        actor_role: str | None,
        actor_id: str | None = None,
        reason: str | None = None,
        now: datetime | None = None,
    ) -> ContentItem:
        """Move a PENDING item to APPROVED or REJECTED and write an audit row."""
        self._require_moderator(actor_role)
        target = self._parse_target(target_state)
        self._check_reason(reason)
        now = now or utcnow()

        result = self.db.execute(
            update(ContentItem)
            .where(
                ContentItem.id == content_id,
                ContentItem.approval_status == ApprovalStatus.PENDING.value,
            )
            .values(
                approval_status=target.value,
                moderation_note=reason,
                moderated_by=actor_id,
                moderated_at=now,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            self.db.rollback()
            item = self.get_item(content_id)
            if item is None:
                raise NotFoundError(f"Content item {content_id} not found")
            raise StateConflictError(
                f"Content item {content_id} is already {item.approval_status}"
            )

        self.audit.log(
            actor_type=actor_role.upper(),
            actor_id=actor_id,
            action="APPROVE" if target is ApprovalStatus.APPROVED else "REJECT",
            entity_type="content_item",
            entity_id=content_id,
            payload={"status": target.value, "reason": reason},
        )
        self.db.commit()
        content_moderated_total.labels(target_state=target.value).inc()

        item = self.get_item(content_id)
        logger.info(
            "content_moderated",
            extra={"content_id": content_id, "target_state": target.value, "actor_role": actor_role},
        )
        return item

    @storage_call
    def bulk_transition(
        self,
        content_ids: list[str],
        target_state: str,
        actor_role: str | None,
        actor_id: str | None = None,
        reason: str | None = None,
        now: datetime | None = None,
    ) -> int:
        """Moderate many items at once. Ids no longer PENDING are skipped. Returns updated count."""
        self._require_moderator(actor_role)
        target = self._parse_target(target_state)
        self._check_reason(reason)
        ids = [cid for cid in dict.fromkeys(content_ids) if cid]
        if not ids:
            raise ValidationError("content_ids must not be empty")
        now = now or utcnow()

        result = self.db.execute(
            update(ContentItem)
            .where(
                ContentItem.id.in_(ids),
                ContentItem.approval_status == ApprovalStatus.PENDING.value,
            )
            .values(
                approval_status=target.value,
                moderation_note=reason,
                moderated_by=actor_id,
                moderated_at=now,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        updated = result.rowcount or 0

        self.audit.log(
            actor_type=actor_role.upper(),
            actor_id=actor_id,
            action=f"BULK_{target.value}",
            entity_type="content_item",
            entity_id=None,
            payload={"requested": len(ids), "updated": updated, "reason": reason},
        )
        self.db.commit()
        if updated:
            content_moderated_total.labels(target_state=target.value).inc(updated)
        logger.info(
            "content_bulk_moderated",
            extra={"target_state": target.value, "updated_count": updated, "actor_role": actor_role},
        )
        return updated

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_item(self, content_id: str) -> ContentItem | None:
        return self.db.query(ContentItem).filter(ContentItem.id == content_id).one_or_none()

    @storage_call
    def list_pending(self, kind: str | None = None) -> list[ContentItem]:
        """PENDING items, oldest first."""
        q = self.db.query(ContentItem).filter(
            ContentItem.approval_status == ApprovalStatus.PENDING.value
        )
        if kind:
            try:
                q = q.filter(ContentItem.kind == coerce(ContentKind, kind).value)
            except ValueError:
                raise ValidationError(f"Unknown content kind: {kind}") from None
        return q.order_by(ContentItem.created_at, ContentItem.id).all()
