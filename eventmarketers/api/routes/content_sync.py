from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from eventmarketers.api.deps import require_moderator
from eventmarketers.db.session import get_db
from eventmarketers.schemas.content import ContentItemOut
from eventmarketers.schemas.content_sync import MobileProjectionOut, SyncStatus, SyncSummary
from eventmarketers.services.content_sync.service import ContentSyncService


router = APIRouter(
    prefix="/content-sync",
    tags=["content-sync"],
    dependencies=[Depends(require_moderator)],
)


@router.get("/status", response_model=SyncStatus)
def sync_status(db: Session = Depends(get_db)) -> SyncStatus:
    return ContentSyncService(db).sync_status()


@router.post("/sync-all", response_model=SyncSummary)
def sync_all(kind: str | None = Query(None), db: Session = Depends(get_db)) -> SyncSummary:
    return ContentSyncService(db).sync_all(kind=kind)


@router.post("/sync/{content_id}", response_model=MobileProjectionOut)
def sync_one(content_id: str, db: Session = Depends(get_db)) -> MobileProjectionOut:
    projection = ContentSyncService(db).sync_one(content_id)
    return MobileProjectionOut.model_validate(projection)


@router.get("/pending", response_model=list[ContentItemOut])
def pending_sync(kind: str | None = Query(None), db: Session = Depends(get_db)) -> list[ContentItemOut]:
    items = ContentSyncService(db).list_pending_sync(kind)
    return [ContentItemOut.model_validate(item) for item in items]
