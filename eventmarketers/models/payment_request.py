"""
PaymentRequest: created at payment initiation (external).
PENDING -> EXPIRED only by the sweeper, PENDING -> COMPLETED only by payment completion.
"""
from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import Column, DateTime, Integer, String

from eventmarketers.db.base import Base


class PaymentRequest(Base):
    __tablename__ = "payment_requests"

    id = Column(String, primary_key=True, default=lambda: str(uuid4()))
    owner_id = Column(String, nullable=False, index=True)
    plan_id = Column(String, nullable=True)
    amount = Column(Integer, nullable=True)                      # minor units
    currency = Column(String, nullable=False, default="INR")
    provider_order_id = Column(String, unique=True, nullable=True)
    status = Column(String, nullable=False, default="PENDING", index=True)  # PENDING / COMPLETED / EXPIRED
    expires_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    completed_at = Column(DateTime(timezone=True), nullable=True)
