from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text, UniqueConstraint

from eventmarketers.db.base import Base, JSONType


class MobileProjection(Base):
    """Public, read-optimized copy of an approved ContentItem.

    At most one row per source_id; the unique constraint is the exactly-once guard.
    """

    __tablename__ = "mobile_projections"
    __table_args__ = (UniqueConstraint("source_id", name="uq_mobile_projections_source"),)

    id = Column(String, primary_key=True)                 # tmpl_<source> / vid_<source>
    source_id = Column(String, nullable=False, index=True)
    kind = Column(String, nullable=False)                 # IMAGE / VIDEO
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    image_url = Column(String, nullable=True)
    file_url = Column(String, nullable=True)
    video_url = Column(String, nullable=True)
    thumbnail_url = Column(String, nullable=True)
    category = Column(String, nullable=False, default="general")
    type = Column(String, nullable=False, default="daily")
    language = Column(String, nullable=False, default="en")
    is_premium = Column(Boolean, nullable=False, default=False)
    tags = Column(JSONType, nullable=False, default=list)
    duration = Column(Integer, nullable=True)
    # Counters are independent from the source item.
    downloads = Column(Integer, nullable=False, default=0)
    likes = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    mobile_sync_at = Column(DateTime(timezone=True), nullable=True)
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
