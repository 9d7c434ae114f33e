"""Row builders for service and route tests. Each helper commits its row."""
from datetime import datetime, timedelta, timezone
from uuid import uuid4

from eventmarketers.models import ContentItem, MobileUser, PaymentRequest, Subscription

NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)


def make_content(db, **kwargs) -> ContentItem:
    item = ContentItem(
        id=kwargs.pop("id", str(uuid4())),
        kind=kwargs.pop("kind", "IMAGE"),
        title=kwargs.pop("title", "Diwali Sale Banner"),
        url=kwargs.pop("url", "https://cdn.example.com/images/diwali.png"),
        category=kwargs.pop("category", "FESTIVAL"),
        tags=kwargs.pop("tags", ["diwali", "sale"]),
        approval_status=kwargs.pop("approval_status", "PENDING"),
        is_active=kwargs.pop("is_active", True),
        is_mobile_synced=kwargs.pop("is_mobile_synced", False),
        created_at=kwargs.pop("created_at", NOW - timedelta(hours=1)),
        **kwargs,
    )
    db.add(item)
    db.commit()
    return item


def make_user(db, user_id: str | None = None) -> MobileUser:
    user = MobileUser(id=user_id or str(uuid4()), email=f"{uuid4().hex[:8]}@example.com")
    db.add(user)
    db.commit()
    return user


def make_subscription(db, owner_id: str, **kwargs) -> Subscription:
    sub = Subscription(
        owner_id=owner_id,
        plan=kwargs.pop("plan", "Monthly Pro"),
        plan_id=kwargs.pop("plan_id", "monthly_pro"),
        status=kwargs.pop("status", "ACTIVE"),
        start_date=kwargs.pop("start_date", NOW - timedelta(days=20)),
        end_date=kwargs.pop("end_date", NOW + timedelta(days=10)),
        created_at=kwargs.pop("created_at", NOW - timedelta(days=20)),
        **kwargs,
    )
    db.add(sub)
    db.commit()
    return sub


def make_payment(db, owner_id: str, **kwargs) -> PaymentRequest:
    payment = PaymentRequest(
        owner_id=owner_id,
        plan_id=kwargs.pop("plan_id", "monthly_pro"),
        amount=kwargs.pop("amount", 29900),
        status=kwargs.pop("status", "PENDING"),
        expires_at=kwargs.pop("expires_at", NOW - timedelta(minutes=5)),
        **kwargs,
    )
    db.add(payment)
    db.commit()
    return payment
