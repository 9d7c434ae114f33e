"""
Status and type vocabularies. Columns store the ``.value`` strings.
"""
from enum import Enum


class ApprovalStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


# Targets a moderator may move a PENDING item to; both are terminal.
MODERATION_TARGETS = frozenset({ApprovalStatus.APPROVED, ApprovalStatus.REJECTED})


class ContentKind(str, Enum):
    IMAGE = "IMAGE"
    VIDEO = "VIDEO"


class ContentCategory(str, Enum):
    BUSINESS = "BUSINESS"
    FESTIVAL = "FESTIVAL"
    GENERAL = "GENERAL"


class SubscriptionStatus(str, Enum):
    ACTIVE = "ACTIVE"
    EXPIRED = "EXPIRED"
    CANCELLED = "CANCELLED"


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    EXPIRED = "EXPIRED"


class ResourceType(str, Enum):
    TEMPLATE = "TEMPLATE"
    VIDEO = "VIDEO"
    GREETING = "GREETING"
    POSTER = "POSTER"
    CONTENT = "CONTENT"


class UsageKind(str, Enum):
    DOWNLOAD = "DOWNLOAD"
    LIKE = "LIKE"


class EntitlementStatus(str, Enum):
    ACTIVE = "ACTIVE"
    EXPIRED = "EXPIRED"
    INACTIVE = "INACTIVE"


def coerce(enum_cls, value):
    """Member of enum_cls for a member or a case-insensitive value string; ValueError otherwise."""
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        return enum_cls(value.strip().upper())
    raise ValueError(f"{value!r} is not a valid {enum_cls.__name__}")
