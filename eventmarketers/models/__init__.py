"""
ORM models. Importing this package registers every table on Base.metadata.
"""
from eventmarketers.models.audit_log import AuditLog
from eventmarketers.models.content_item import ContentItem
from eventmarketers.models.mobile_projection import MobileProjection
from eventmarketers.models.mobile_user import MobileUser
from eventmarketers.models.payment_request import PaymentRequest
from eventmarketers.models.subscription import Subscription
from eventmarketers.models.usage_record import UsageRecord

__all__ = [
    "AuditLog",
    "ContentItem",
    "MobileProjection",
    "MobileUser",
    "PaymentRequest",
    "Subscription",
    "UsageRecord",
]
