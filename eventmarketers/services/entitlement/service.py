"""
EntitlementService: is this owner allowed access right now, and for how long.

Status is always recomputed from end_date vs now; the stored subscription
status column may lag (payment completion and the sweeper write it on their
own schedule) and is only used to exclude non-ACTIVE rows from step 1.
"""
import math
from datetime import datetime

from sqlalchemy.orm import Session

from eventmarketers.core.config import Settings, settings as default_settings
from eventmarketers.db.session import storage_call
from eventmarketers.models.enums import EntitlementStatus, SubscriptionStatus
from eventmarketers.models.subscription import Subscription
from eventmarketers.schemas.entitlement import EntitlementOut, SubscriptionOut
from eventmarketers.services.payments.sweeper import PaymentSweeper
from eventmarketers.utils.clock import as_utc, utcnow


SECONDS_PER_DAY = 86400


def days_until(end_date: datetime, now: datetime) -> int:
    """ceil((end_date - now) / 1 day); negative once end_date has passed."""
    return math.ceil((as_utc(end_date) - as_utc(now)).total_seconds() / SECONDS_PER_DAY)


class EntitlementService:
    def __init__(self, db: Session, config: Settings | None = None):
        self.db = db
        self.settings = config or default_settings
        self.sweeper = PaymentSweeper(db)

    @storage_call
    def get_status(self, owner_id: str, now: datetime | None = None) -> EntitlementOut:
        now = now or utcnow()
        if self.settings.entitlement_lazy_sweep:
            self.sweeper.expire_pending(owner_id, now=now)

        total = (
            self.db.query(Subscription)
            .filter(Subscription.owner_id == owner_id)
            .count()
        )

        # A renewal can be created before the older term ends: latest end_date wins.
        active = (
            self.db.query(Subscription)
            .filter(
                Subscription.owner_id == owner_id,
                Subscription.status == SubscriptionStatus.ACTIVE.value,
                Subscription.end_date >= now,
            )
            .order_by(Subscription.end_date.desc())
            .first()
        )
        if active is not None:
            return EntitlementOut(
                status=EntitlementStatus.ACTIVE,
                current_plan=active.plan,
                plan_id=active.plan_id,
                days_remaining=days_until(active.end_date, now),
                total_subscriptions=total,
                end_date=as_utc(active.end_date),
            )

        latest = (
            self.db.query(Subscription)
            .filter(Subscription.owner_id == owner_id)
            .order_by(Subscription.created_at.desc())
            .first()
        )
        if latest is not None and as_utc(latest.end_date) < as_utc(now):
            return EntitlementOut(
                status=EntitlementStatus.EXPIRED,
                current_plan=latest.plan,
                plan_id=latest.plan_id,
                days_remaining=days_until(latest.end_date, now),
                total_subscriptions=total,
                end_date=as_utc(latest.end_date),
            )

        # No subscriptions at all, or the latest one is not ACTIVE and has not ended yet.
        return EntitlementOut(
            status=EntitlementStatus.INACTIVE,
            days_remaining=0,
            total_subscriptions=total,
        )

    @storage_call
    def list_history(self, owner_id: str, now: datetime | None = None) -> list[SubscriptionOut]:
        """All subscriptions for the owner, newest first."""
        now = now or utcnow()
        rows = (
            self.db.query(Subscription)
            .filter(Subscription.owner_id == owner_id)
            .order_by(Subscription.created_at.desc())
            .all()
        )
        history = []
        for sub in rows:
            out = SubscriptionOut.model_validate(sub)
            history.append(
                out.model_copy(
                    update={
                        "is_current": sub.status == SubscriptionStatus.ACTIVE.value
                        and as_utc(sub.end_date) >= as_utc(now),
                        "start_date": as_utc(sub.start_date),
                        "end_date": as_utc(sub.end_date),
                        "created_at": as_utc(sub.created_at),
                    }
                )
            )
        return history
