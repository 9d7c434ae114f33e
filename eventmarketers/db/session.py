import functools
import logging
from typing import Any, Callable

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError, TimeoutError as PoolTimeoutError
from sqlalchemy.orm import sessionmaker

from eventmarketers.core.config import Settings, settings
from eventmarketers.core.errors import TransientStorageError
from eventmarketers.utils.metrics import storage_errors_total

logger = logging.getLogger(__name__)


def build_engine(config: Settings) -> Engine:
    if config.is_sqlite:
        return create_engine(
            config.database_url,
            connect_args={"check_same_thread": False, "timeout": config.db_connect_timeout_seconds},
        )
    return create_engine(
        config.database_url,
        pool_pre_ping=True,
        pool_size=config.db_pool_size,
        max_overflow=config.db_max_overflow,
        pool_timeout=config.db_pool_timeout_seconds,
        pool_recycle=config.db_pool_recycle_seconds,  # recycle connections (avoid stale)
        connect_args={
            "connect_timeout": config.db_connect_timeout_seconds,
            "options": f"-c statement_timeout={config.db_statement_timeout_ms}",
        },
    )


engine = build_engine(settings)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


def get_db():
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def storage_call(func: Callable[..., Any]) -> Callable[..., Any]:
    """Service-method decorator: connectivity/timeout faults become TransientStorageError.

    The wrapped method's owner must expose the session as ``self.db``; it is
    rolled back before the error propagates.
    """

    @functools.wraps(func)
    def wrapper(self, *args: Any, **kwargs: Any) -> Any:
        try:
            return func(self, *args, **kwargs)
        except (OperationalError, PoolTimeoutError) as exc:
            try:
                self.db.rollback()
            except Exception:
                logger.exception("storage_rollback_failed")
            logger.warning(
                "storage_unavailable",
                extra={"error": str(getattr(exc, "orig", None) or exc)},
            )
            storage_errors_total.inc()
            raise TransientStorageError("Storage temporarily unavailable") from exc

    return wrapper
