"""
UsageLedgerService: idempotent download/like facts.

At most one row per (user, kind, resource_type, resource_id). The unique
constraint decides; the pre-insert lookup is only a fast path. A losing
concurrent insert surfaces as IntegrityError and is turned into the
"already tracked" result.
"""
import logging
import math
from uuid import uuid4

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eventmarketers.core.config import Settings, settings as default_settings
from eventmarketers.core.errors import NotFoundError, ValidationError
from eventmarketers.db.session import storage_call
from eventmarketers.models.enums import ResourceType, UsageKind, coerce
from eventmarketers.models.mobile_projection import MobileProjection
from eventmarketers.models.mobile_user import MobileUser
from eventmarketers.models.usage_record import UsageRecord
from eventmarketers.schemas.usage import (
    Pagination,
    TrackUsageOut,
    UsageCheckOut,
    UsagePage,
    UsageRecordOut,
    UsageStatistics,
)
from eventmarketers.utils.metrics import usage_records_total

logger = logging.getLogger(__name__)

# Resource types that point at a mobile projection and carry its counters.
_PROJECTED_TYPES = frozenset({ResourceType.TEMPLATE, ResourceType.VIDEO})


class UsageLedgerService:
    def __init__(self, db: Session, config: Settings | None = None):
        self.db = db
        self.settings = config or default_settings

    # ------------------------------------------------------------------
    # Tracking
    # ------------------------------------------------------------------

    @storage_call
    def track_usage(
        self,
        user_id: str,
        resource_type: str,
        resource_id: str,
        kind: str = UsageKind.DOWNLOAD.value,
        file_url: str | None = None,
    ) -> TrackUsageOut:
        rtype = self._parse_resource_type(resource_type)
        ukind = self._parse_kind(kind)
        resource_id = (resource_id or "").strip()
        if not resource_id:
            raise ValidationError("resource_id is required")

        if not self._user_exists(user_id):
            raise NotFoundError(f"User {user_id} not found")

        existing = self._find(user_id, ukind, rtype, resource_id)
        if existing is not None:
            return self._result(existing, is_new=False)

        if file_url is None and ukind is UsageKind.DOWNLOAD:
            file_url = f"/{rtype.value.lower()}/{resource_id}"

        record = UsageRecord(
            id=str(uuid4()),
            user_id=user_id,
            kind=ukind.value,
            resource_type=rtype.value,
            resource_id=resource_id,
            file_url=file_url,
        )
        try:
            self.db.add(record)
            self.db.flush()
            self._bump_projection_counter(ukind, rtype, resource_id)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            existing = self._find(user_id, ukind, rtype, resource_id)
            if existing is None:
                raise
            return self._result(existing, is_new=False)

        logger.info(
            "usage_tracked",
            extra={
                "user_id": user_id,
                "kind": ukind.value,
                "resource_type": rtype.value,
                "resource_id": resource_id,
            },
        )
        return self._result(record, is_new=True)

    def _result(self, record: UsageRecord, is_new: bool) -> TrackUsageOut:
        usage_records_total.labels(kind=record.kind, outcome="new" if is_new else "existing").inc()
        return TrackUsageOut(record=UsageRecordOut.model_validate(record), is_new=is_new)

    def _bump_projection_counter(self, kind: UsageKind, rtype: ResourceType, resource_id: str) -> None:
        """Move the projection's counter in the same transaction as the new record."""
        if rtype not in _PROJECTED_TYPES:
            return
        column = MobileProjection.downloads if kind is UsageKind.DOWNLOAD else MobileProjection.likes
        self.db.execute(
            update(MobileProjection)
            .where(MobileProjection.id == resource_id)
            .values({column: column + 1})
            .execution_options(synchronize_session=False)
        )

    def _find(
        self, user_id: str, kind: UsageKind, rtype: ResourceType, resource_id: str
    ) -> UsageRecord | None:
        return (
            self.db.query(UsageRecord)
            .filter(
                UsageRecord.user_id == user_id,
                UsageRecord.kind == kind.value,
                UsageRecord.resource_type == rtype.value,
                UsageRecord.resource_id == resource_id,
            )
            .one_or_none()
        )

    def _user_exists(self, user_id: str) -> bool:
        if not user_id:
            return False
        return self.db.query(MobileUser.id).filter(MobileUser.id == user_id).first() is not None

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @storage_call
    def list_usage(
        self,
        user_id: str,
        resource_type: str | None = None,
        kind: str | None = None,
        page: int = 1,
        limit: int | None = None,
    ) -> UsagePage:
        """Newest first, paginated."""
        limit = limit if limit is not None else self.settings.usage_default_page_size
        if page < 1:
            raise ValidationError("page must be >= 1")
        if limit < 1 or limit > self.settings.usage_max_page_size:
            raise ValidationError(f"limit must be between 1 and {self.settings.usage_max_page_size}")

        q = self.db.query(UsageRecord).filter(UsageRecord.user_id == user_id)
        if resource_type:
            q = q.filter(UsageRecord.resource_type == self._parse_resource_type(resource_type).value)
        if kind:
            q = q.filter(UsageRecord.kind == self._parse_kind(kind).value)

        total = q.count()
        rows = (
            q.order_by(UsageRecord.created_at.desc(), UsageRecord.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return UsagePage(
            items=[UsageRecordOut.model_validate(r) for r in rows],
            pagination=Pagination(
                page=page,
                limit=limit,
                total=total,
                pages=math.ceil(total / limit),
            ),
        )

    @storage_call
    def has_usage(self, user_id: str, kind: str, resource_type: str, resource_id: str) -> UsageCheckOut:
        """Whether the user already has this fact, e.g. a like on a template."""
        ukind = self._parse_kind(kind)
        rtype = self._parse_resource_type(resource_type)
        resource_id = (resource_id or "").strip()
        if not resource_id:
            raise ValidationError("resource_id is required")

        exists = self._find(user_id, ukind, rtype, resource_id) is not None
        return UsageCheckOut(kind=ukind, resource_type=rtype, resource_id=resource_id, exists=exists)

    @storage_call
    def usage_statistics(self, user_id: str, kind: str = UsageKind.DOWNLOAD.value) -> UsageStatistics:
        ukind = self._parse_kind(kind)
        rows = (
            self.db.query(UsageRecord.resource_type, func.count(UsageRecord.id))
            .filter(UsageRecord.user_id == user_id, UsageRecord.kind == ukind.value)
            .group_by(UsageRecord.resource_type)
            .all()
        )
        by_type = {rt.value.lower(): 0 for rt in ResourceType}
        for rtype, count in rows:
            by_type[rtype.lower()] = count
        return UsageStatistics(kind=ukind, total=sum(by_type.values()), by_type=by_type)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    @staticmethod
    def _parse_resource_type(value: str) -> ResourceType:
        try:
            return coerce(ResourceType, value)
        except ValueError:
            allowed = ", ".join(rt.value for rt in ResourceType)
            raise ValidationError(f"Resource type must be one of {allowed}") from None

    @staticmethod
    def _parse_kind(value: str) -> UsageKind:
        try:
            return coerce(UsageKind, value)
        except ValueError:
            raise ValidationError("Usage kind must be DOWNLOAD or LIKE") from None
