from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class SyncError(BaseModel):
    id: str
    reason: str

    model_config = ConfigDict(frozen=True)


class SyncSummary(BaseModel):
    """Result of sync_all: per-item failures are isolated here instead of aborting the batch."""

    total: int = 0
    succeeded: int = 0
    failed: int = 0
    created: int = Field(0, description="Projections inserted by this run")
    errors: list[SyncError] = Field(default_factory=list)


class KindSyncStatus(BaseModel):
    total: int
    synced: int
    pending: int
    sync_percentage: int


class ProjectionCounts(BaseModel):
    templates: int
    videos: int


class SyncStatus(BaseModel):
    images: KindSyncStatus
    videos: KindSyncStatus
    mobile: ProjectionCounts


class MobileProjectionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    source_id: str
    kind: str
    title: str
    description: str | None = None
    image_url: str | None = None
    file_url: str | None = None
    video_url: str | None = None
    thumbnail_url: str | None = None
    category: str
    type: str
    language: str
    is_premium: bool
    tags: list[str] = Field(default_factory=list)
    duration: int | None = None
    downloads: int
    likes: int
    is_active: bool
    mobile_sync_at: datetime | None = None
