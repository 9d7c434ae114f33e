from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from eventmarketers.api.deps import Principal, get_principal
from eventmarketers.db.session import get_db
from eventmarketers.schemas.usage import (
    TrackUsageIn,
    TrackUsageOut,
    UsageCheckOut,
    UsagePage,
    UsageStatistics,
)
from eventmarketers.services.usage.service import UsageLedgerService


router = APIRouter(prefix="/mobile/usage", tags=["usage"])


@router.post("/track", response_model=TrackUsageOut)
def track_usage(
    payload: TrackUsageIn,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> TrackUsageOut:
    return UsageLedgerService(db).track_usage(
        principal.id,
        payload.resource_type,
        payload.resource_id,
        kind=payload.kind,
        file_url=payload.file_url,
    )


@router.get("", response_model=UsagePage)
def list_usage(
    resource_type: str | None = Query(None),
    kind: str | None = Query(None),
    page: int = Query(1),
    limit: int | None = Query(None),
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> UsagePage:
    return UsageLedgerService(db).list_usage(
        principal.id,
        resource_type=resource_type,
        kind=kind,
        page=page,
        limit=limit,
    )


@router.get("/check", response_model=UsageCheckOut)
def check_usage(
    resource_type: str = Query(...),
    resource_id: str = Query(...),
    kind: str = Query("LIKE"),
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> UsageCheckOut:
    return UsageLedgerService(db).has_usage(principal.id, kind, resource_type, resource_id)


@router.get("/statistics", response_model=UsageStatistics)
def usage_statistics(
    kind: str = Query("DOWNLOAD"),
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> UsageStatistics:
    return UsageLedgerService(db).usage_statistics(principal.id, kind=kind)
