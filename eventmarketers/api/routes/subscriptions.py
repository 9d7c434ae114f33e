from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from eventmarketers.api.deps import Principal, get_principal, require_moderator
from eventmarketers.db.session import get_db
from eventmarketers.schemas.entitlement import EntitlementOut, ExpirePendingOut, SubscriptionOut
from eventmarketers.services.entitlement.service import EntitlementService
from eventmarketers.services.payments.sweeper import PaymentSweeper


router = APIRouter(tags=["subscriptions"])


@router.get("/mobile/subscription/status", response_model=EntitlementOut)
def subscription_status(
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> EntitlementOut:
    return EntitlementService(db).get_status(principal.id)


@router.get("/mobile/subscription/history", response_model=list[SubscriptionOut])
def subscription_history(
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> list[SubscriptionOut]:
    return EntitlementService(db).list_history(principal.id)


@router.post("/payments/expire-pending", response_model=ExpirePendingOut)
def expire_pending_payments(
    owner_id: str | None = Query(None),
    _: Principal = Depends(require_moderator),
    db: Session = Depends(get_db),
) -> ExpirePendingOut:
    return ExpirePendingOut(expired_count=PaymentSweeper(db).expire_pending(owner_id))
