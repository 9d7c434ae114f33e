"""
Moderation endpoints. Role checks happen in ModerationService so the same
rules apply to non-HTTP callers.
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from eventmarketers.api.deps import Principal, get_principal, require_moderator
from eventmarketers.db.session import get_db
from eventmarketers.schemas.content import (
    BulkModerationIn,
    BulkModerationOut,
    ContentItemOut,
    ModerationIn,
)
from eventmarketers.services.moderation.service import ModerationService


router = APIRouter(prefix="/content", tags=["content"])


@router.put("/{content_id}/approval", response_model=ContentItemOut)
def moderate_content(
    content_id: str,
    payload: ModerationIn,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> ContentItemOut:
    service = ModerationService(db)
    item = service.transition(
        content_id,
        payload.status,
        actor_role=principal.role,
        actor_id=principal.id,
        reason=payload.reason,
    )
    return ContentItemOut.model_validate(item)


@router.post("/bulk-approval", response_model=BulkModerationOut)
def bulk_moderate(
    payload: BulkModerationIn,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> BulkModerationOut:
    service = ModerationService(db)
    updated = service.bulk_transition(
        payload.content_ids,
        payload.status,
        actor_role=principal.role,
        actor_id=principal.id,
        reason=payload.reason,
    )
    return BulkModerationOut(status=payload.status, updated_count=updated)


@router.get("/pending-approvals", response_model=list[ContentItemOut])
def pending_approvals(
    kind: str | None = Query(None),
    _: Principal = Depends(require_moderator),
    db: Session = Depends(get_db),
) -> list[ContentItemOut]:
    service = ModerationService(db)
    return [ContentItemOut.model_validate(item) for item in service.list_pending(kind)]
