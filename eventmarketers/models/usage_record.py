from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import Column, DateTime, String, UniqueConstraint

from eventmarketers.db.base import Base


class UsageRecord(Base):
    __tablename__ = "usage_records"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "kind", "resource_type", "resource_id",
            name="uq_usage_records_user_resource",
        ),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String, nullable=False, index=True)
    kind = Column(String, nullable=False)            # DOWNLOAD, LIKE
    resource_type = Column(String, nullable=False)   # TEMPLATE, VIDEO, GREETING, POSTER, CONTENT
    resource_id = Column(String, nullable=False)
    file_url = Column(String, nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
