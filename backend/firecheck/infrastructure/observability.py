"""Structured Logging — formatters and one-time setup for the FireCheck process.

Invariants:
    - Every line carries timestamp, level, logger name and message
    - Context fields (entity_kind, entity_id, error_code, operation, history_table,
      path) are emitted only when a call site passed them via `extra=`
    - setup_logging is idempotent: calling it twice never doubles output

Design Decisions:
    - stdlib logging with a hand-written JSON formatter, no logging dependency
    - entity_extra() builds the `extra=` mapping so call sites name fields the same way
"""

import json
import logging
from datetime import datetime, timezone

CONTEXT_FIELDS = (
    "entity_kind", "entity_id", "error_code", "operation",
    "history_table", "path",
)


def _context_of(record: logging.LogRecord) -> dict:
    return {
        key: record.__dict__[key]
        for key in CONTEXT_FIELDS
        if record.__dict__.get(key) is not None
    }


class JSONFormatter(logging.Formatter):
    """One JSON object per line (production)."""

    def format(self, record: logging.LogRecord) -> str:
        line = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_context_of(record),
        }
        if record.exc_info:
            line["exception"] = self.formatException(record.exc_info)
        return json.dumps(line, ensure_ascii=False, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable lines with context appended as key=value (development)."""

    def __init__(self):
        super().__init__("%(asctime)s %(levelname)s %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        context = _context_of(record)
        if context:
            text += " [" + " ".join(f"{k}={v}" for k, v in context.items()) + "]"
        return text


_handler: logging.Handler | None = None


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Install the FireCheck handler on the root logger (replacing a previous one)."""
    global _handler
    if _handler is not None:
        logging.root.removeHandler(_handler)
    _handler = logging.StreamHandler()
    _handler.setFormatter(JSONFormatter() if fmt == "json" else TextFormatter())
    logging.root.addHandler(_handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))


def entity_extra(kind: object, entity_id: str | None = None, **fields) -> dict:
    """Build the `extra=` mapping for a log line about one entity."""
    extra = {"entity_kind": getattr(kind, "value", kind), "entity_id": entity_id}
    extra.update(fields)
    return extra
