"""
ContentItem: admin/creator-submitted image or video subject to moderation.
approval_status is terminal once it leaves PENDING; is_mobile_synced only goes false -> true.
"""
from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text

from eventmarketers.db.base import Base, JSONType


class ContentItem(Base):
    __tablename__ = "content_items"

    id = Column(String, primary_key=True, default=lambda: str(uuid4()))
    kind = Column(String, nullable=False, default="IMAGE")            # IMAGE / VIDEO
    title = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    url = Column(String, nullable=True)                               # already hosted by object storage
    thumbnail_url = Column(String, nullable=True)
    category = Column(String, nullable=False, default="GENERAL")      # BUSINESS / FESTIVAL / GENERAL
    tags = Column(JSONType, nullable=False, default=list)
    duration = Column(Integer, nullable=True)                         # seconds, videos only
    downloads = Column(Integer, nullable=False, default=0)

    approval_status = Column(String, nullable=False, default="PENDING", index=True)
    moderation_note = Column(Text, nullable=True)
    moderated_by = Column(String, nullable=True)
    moderated_at = Column(DateTime(timezone=True), nullable=True)

    is_active = Column(Boolean, nullable=False, default=True)
    is_mobile_synced = Column(Boolean, nullable=False, default=False, index=True)
    mobile_sync_at = Column(DateTime(timezone=True), nullable=True)
    mobile_projection_id = Column(String, nullable=True)

    owner_category_id = Column(String, nullable=True, index=True)   # business category
    created_by = Column(String, nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
