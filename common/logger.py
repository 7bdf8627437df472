"""Unified logger with request_id tracing."""
import logging
import uuid
from contextvars import ContextVar

from config.settings import LOG_LEVEL

request_id_var: ContextVar[str] = ContextVar("request_id", default="")

_base_factory = logging.getLogRecordFactory()


def _record_factory(*args, **kwargs):
    record = _base_factory(*args, **kwargs)
    record.request_id = request_id_var.get() or "-"
    return record


logging.setLogRecordFactory(_record_factory)


def level_from_name(name: str) -> int:
    """Numeric level for a LOG_LEVEL value; unknown names mean INFO."""
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        fmt = logging.Formatter(
            "[%(asctime)s] [%(request_id)s] %(levelname)s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )
        handler.setFormatter(fmt)
        logger.addHandler(handler)
        logger.setLevel(level_from_name(LOG_LEVEL))
    return logger


def new_request_id() -> str:
    """Start a new trace id for the current context (API call, scheduler run)."""
    rid = str(uuid.uuid4())[:8]
    request_id_var.set(rid)
    return rid
