import json
import logging
from logging.handlers import RotatingFileHandler
from datetime import datetime, timezone

from eventmarketers.core.config import Settings, settings as default_settings


class JsonFormatter(logging.Formatter):
    """JSON log formatter with support for extra fields."""

    # Fields to extract from log record's extra dict
    EXTRA_FIELDS = (
        "request_id", "path", "method", "status_code", "latency_ms",
        "content_id", "projection_id", "user_id", "owner_id",
        "resource_type", "resource_id", "kind", "target_state", "actor_role",
        "succeeded", "failed", "expired_count", "updated_count", "error",
        "error_code", "check",
    )

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for field in self.EXTRA_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                payload[field] = value

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(config: Settings | None = None) -> None:
    config = config or default_settings
    formatter = JsonFormatter()
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    root = logging.getLogger()
    root.setLevel(config.log_level.upper())
    handlers = [handler]
    if config.log_file:
        file_handler = RotatingFileHandler(
            config.log_file,
            maxBytes=config.log_max_bytes,
            backupCount=config.log_backup_count,
        )
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)
    root.handlers = handlers
