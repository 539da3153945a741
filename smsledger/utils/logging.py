"""
JSON log lines tagged with the request's correlation ID.
"""
import json
import logging
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Optional

correlation_id: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)


def bind_correlation_id(incoming: Optional[str] = None) -> str:
    """Use the caller's X-Correlation-ID or mint one (UUID4 hex); returns the bound value."""
    cid = incoming or uuid.uuid4().hex
    correlation_id.set(cid)
    return cid


class JsonLineFormatter(logging.Formatter):
    """One JSON object per record; ingestion fields passed via ``extra=`` are kept."""

    extra_fields = ("message_sid", "is_authentic", "error_code")

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "correlation_id": correlation_id.get(),
            "module": record.name,
            "message": record.getMessage(),
        }
        entry.update(
            (key, getattr(record, key))
            for key in self.extra_fields
            if getattr(record, key, None) is not None
        )
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def configure_structured_logging(log_level: str = "INFO") -> None:
    """Route every logger through a single stdout JSON handler. Call once at startup."""
    handler = logging.StreamHandler()
    handler.setFormatter(JsonLineFormatter())

    root_logger = logging.getLogger()
    root_logger.handlers[:] = [handler]
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # uvicorn runs with log_config=None, so its per-request access lines would land here too
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
