from datetime import datetime

from pydantic import BaseModel, ConfigDict

from eventmarketers.models.enums import EntitlementStatus


class EntitlementOut(BaseModel):
    """Derived access answer for an owner.

    days_remaining is negative for EXPIRED (days since expiry, signed).
    """

    model_config = ConfigDict(frozen=True)

    status: EntitlementStatus
    current_plan: str | None = None
    plan_id: str | None = None
    days_remaining: int = 0
    total_subscriptions: int = 0
    end_date: datetime | None = None


class SubscriptionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    plan: str
    plan_id: str | None = None
    status: str
    start_date: datetime
    end_date: datetime
    amount: int | None = None
    payment_id: str | None = None
    auto_renew: bool = False
    created_at: datetime
    is_current: bool = False


class ExpirePendingOut(BaseModel):
    expired_count: int
