"""
PaymentSweeper: lazy/periodic time-based status flips.

Each sweep is a single conditional UPDATE, so concurrent or repeated runs are
harmless: a row already flipped no longer matches the WHERE clause.
"""
import logging
from datetime import datetime

from sqlalchemy import update
from sqlalchemy.orm import Session

from eventmarketers.db.session import storage_call
from eventmarketers.models.enums import PaymentStatus, SubscriptionStatus
from eventmarketers.models.payment_request import PaymentRequest
from eventmarketers.models.subscription import Subscription
from eventmarketers.utils.clock import utcnow
from eventmarketers.utils.metrics import payment_requests_expired_total, subscriptions_expired_total

logger = logging.getLogger(__name__)


class PaymentSweeper:
    def __init__(self, db: Session):
        self.db = db

    @storage_call
    def expire_pending(self, owner_id: str | None = None, now: datetime | None = None) -> int:
        """PENDING payment requests past expires_at -> EXPIRED. COMPLETED/EXPIRED rows are never touched."""
        now = now or utcnow()
        stmt = (
            update(PaymentRequest)
            .where(
                PaymentRequest.status == PaymentStatus.PENDING.value,
                PaymentRequest.expires_at < now,
            )
            .values(status=PaymentStatus.EXPIRED.value)
            .execution_options(synchronize_session=False)
        )
        if owner_id is not None:
            stmt = stmt.where(PaymentRequest.owner_id == owner_id)
        expired = self.db.execute(stmt).rowcount or 0
        self.db.commit()

        if expired:
            payment_requests_expired_total.inc(expired)
            logger.info(
                "payment_requests_expired",
                extra={"owner_id": owner_id, "expired_count": expired},
            )
        return expired

    @storage_call
    def expire_stale_subscriptions(self, owner_id: str | None = None, now: datetime | None = None) -> int:
        """Stored ACTIVE rows past end_date -> EXPIRED.

        Column hygiene only: entitlement recomputes status from dates and never
        depends on this having run.
        """
        now = now or utcnow()
        stmt = (
            update(Subscription)
            .where(
                Subscription.status == SubscriptionStatus.ACTIVE.value,
                Subscription.end_date < now,
            )
            .values(status=SubscriptionStatus.EXPIRED.value)
            .execution_options(synchronize_session=False)
        )
        if owner_id is not None:
            stmt = stmt.where(Subscription.owner_id == owner_id)
        expired = self.db.execute(stmt).rowcount or 0
        self.db.commit()

        if expired:
            subscriptions_expired_total.inc(expired)
            logger.info(
                "subscriptions_expired",
                extra={"owner_id": owner_id, "expired_count": expired},
            )
        return expired
