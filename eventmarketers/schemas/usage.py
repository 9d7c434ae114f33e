from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from eventmarketers.models.enums import ResourceType, UsageKind


class TrackUsageIn(BaseModel):
    model_config = ConfigDict(extra="ignore")

    resource_type: ResourceType
    resource_id: str = Field(..., min_length=1)
    kind: UsageKind = UsageKind.DOWNLOAD
    file_url: str | None = None

    @field_validator("resource_type", "kind", mode="before")
    @classmethod
    def upper_enum(cls, v):
        # mobile clients send "template" as often as "TEMPLATE"
        return v.upper() if isinstance(v, str) else v

    @field_validator("resource_id")
    @classmethod
    def strip_resource_id(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("resource_id is required")
        return v


class UsageRecordOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    kind: str
    resource_type: str
    resource_id: str
    file_url: str | None = None
    created_at: datetime


class TrackUsageOut(BaseModel):
    record: UsageRecordOut
    is_new: bool


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class UsagePage(BaseModel):
    items: list[UsageRecordOut]
    pagination: Pagination


class UsageStatistics(BaseModel):
    kind: UsageKind
    total: int
    by_type: dict[str, int]


class UsageCheckOut(BaseModel):
    kind: UsageKind
    resource_type: ResourceType
    resource_id: str
    exists: bool
