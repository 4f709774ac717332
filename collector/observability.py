import json
import logging
import os
from typing import Optional

_RECORD_ATTRS = frozenset(
    (
        "args", "msg", "message", "levelname", "levelno", "pathname", "filename",
        "module", "exc_info", "exc_text", "stack_info", "lineno", "funcName",
        "created", "msecs", "relativeCreated", "thread", "threadName",
        "processName", "process", "taskName", "name",
    )
)


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload = {
            "level": record.levelname,
            "time": int(record.created),
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        # attach extras
        for k, v in record.__dict__.items():
            if k.startswith("_") or k in _RECORD_ATTRS:
                continue
            payload[k] = v
        return json.dumps(payload, ensure_ascii=False, default=str)


def setup_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """Configure the root logger; falls back to LOG_LEVEL / LOG_FORMAT."""
    fmt = (fmt or os.getenv("LOG_FORMAT", "text")).lower()
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    root = logging.getLogger()
    root.setLevel(getattr(logging, level, logging.INFO))
    if fmt == "json":
        for h in list(root.handlers):
            h.setFormatter(JsonFormatter())
