"""
Subscription history: written by payment completion (external), read by entitlement.
The stored status may lag behind end_date; entitlement recomputes it.
"""
from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from eventmarketers.db.base import Base


class Subscription(Base):
    __tablename__ = "subscriptions"

    id = Column(String, primary_key=True, default=lambda: str(uuid4()))
    owner_id = Column(String, nullable=False, index=True)
    plan = Column(String, nullable=False)                       # display name, e.g. "Monthly Pro"
    plan_id = Column(String, nullable=True)                     # "monthly_pro" / "yearly_pro"
    status = Column(String, nullable=False, default="ACTIVE")   # ACTIVE / EXPIRED / CANCELLED
    start_date = Column(DateTime(timezone=True), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=False, index=True)
    amount = Column(Integer, nullable=True)                     # minor units
    payment_id = Column(String, nullable=True)
    auto_renew = Column(Boolean, nullable=False, default=False)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
