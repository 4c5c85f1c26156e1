import json
import logging
from datetime import datetime, timezone

from orderledger.config import get_settings

# Structured fields services attach through ``extra=``.
CONTEXT_FIELDS = (
    "order_id",
    "order_number",
    "customer_id",
    "product_id",
    "quantity",
    "status",
    "error_kind",
)


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                payload[field] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True, default=str)


class ContextFormatter(logging.Formatter):
    """Plain-text formatter that appends ``key=value`` pairs for context fields."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        pairs = [
            "{}={}".format(field, getattr(record, field))
            for field in CONTEXT_FIELDS
            if getattr(record, field, None) is not None
        ]
        if not pairs:
            return message
        return "{} [{}]".format(message, " ".join(pairs))


def setup_logging() -> None:
    settings = get_settings()
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    handler = logging.StreamHandler()
    if settings.LOG_JSON:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            ContextFormatter(
                fmt="%(asctime)s %(levelname)s %(name)s - %(message)s",
                datefmt="%Y-%m-%dT%H:%M:%S",
            )
        )

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)


__all__ = ["CONTEXT_FIELDS", "ContextFormatter", "JsonFormatter", "setup_logging"]
