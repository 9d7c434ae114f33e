"""
Liveness and readiness for the API process.

/ready runs every dependency check and reports each one, so an operator can
tell a database outage from a broker outage without reading logs.
"""
import logging

from fastapi import APIRouter, Depends, Response
import redis
from sqlalchemy import text
from sqlalchemy.orm import Session

from eventmarketers.core.config import settings
from eventmarketers.db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


def _check_database(db: Session) -> None:
    db.execute(text("SELECT 1"))


def _check_broker(db: Session) -> None:
    # Sweeps and sync runs are scheduled through the Celery broker.
    redis.Redis.from_url(settings.celery_broker_url, socket_connect_timeout=2).ping()


READINESS_CHECKS = (
    ("database", _check_database),
    ("broker", _check_broker),
)


@router.get("/health")
def health() -> dict:
    return {"status": "ok"}


@router.get("/ready")
def readiness(response: Response, db: Session = Depends(get_db)) -> dict:
    """503 with the failing checks named when any dependency is unreachable."""
    checks = {}
    for name, check in READINESS_CHECKS:
        try:
            check(db)
        except Exception as exc:
            logger.warning("readiness_check_failed", extra={"check": name, "error": str(exc)})
            checks[name] = f"error: {exc}"
        else:
            checks[name] = "ok"

    ready = all(result == "ok" for result in checks.values())
    if not ready:
        response.status_code = 503
    return {"status": "ready" if ready else "not_ready", "checks": checks}
