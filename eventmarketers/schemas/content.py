from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ContentItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    kind: str
    title: str | None = None
    description: str | None = None
    url: str | None = None
    thumbnail_url: str | None = None
    category: str
    tags: list[str] = Field(default_factory=list)
    approval_status: str
    moderation_note: str | None = None
    moderated_by: str | None = None
    moderated_at: datetime | None = None
    is_active: bool
    is_mobile_synced: bool
    mobile_sync_at: datetime | None = None
    mobile_projection_id: str | None = None
    owner_category_id: str | None = None
    created_by: str | None = None
    created_at: datetime

    @field_validator("tags", mode="before")
    @classmethod
    def none_tags(cls, v):
        return v or []


class ModerationIn(BaseModel):
    # Allowed targets and reason length are enforced by ModerationService.
    status: str
    reason: str | None = None


class BulkModerationIn(ModerationIn):
    content_ids: list[str] = Field(..., min_length=1)


class BulkModerationOut(BaseModel):
    status: str
    updated_count: int
