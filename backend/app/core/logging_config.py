"""
StudioTrack - Logging

One application logger, `studiotrack`, shared by every module:

    from app.core.logging_config import logger
    logger.info("[Projects] Created ...")

Each record carries the request, user and project of the current request
(set by the middleware and the auth dependencies). Development output is
plain text; ENVIRONMENT=production switches console and file to JSON lines.
"""

import json
import logging
import sys
import traceback
import uuid
from contextvars import ContextVar
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

from app.core.config import settings


LOGGER_NAME = "studiotrack"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024

_request_id: ContextVar[str] = ContextVar("request_id", default="")
_user_id: ContextVar[str] = ContextVar("user_id", default="")
_project_id: ContextVar[str] = ContextVar("project_id", default="")

# Attributes every LogRecord has; anything else came in through `extra`
_STANDARD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime"}


def set_request_id(request_id: str) -> None:
    _request_id.set(request_id)


def set_user_id(user_id: str) -> None:
    _user_id.set(user_id)


def set_project_id(project_id: str) -> None:
    _project_id.set(project_id)


def generate_request_id() -> str:
    """Short id for X-Request-ID when the client did not send one"""
    return uuid.uuid4().hex[:8]


def current_context() -> Dict[str, str]:
    """Request/user/project ids of the running request (empty outside one)"""
    return {
        "request_id": _request_id.get(),
        "user_id": _user_id.get(),
        "project_id": _project_id.get(),
    }


class JSONFormatter(logging.Formatter):
    """One JSON object per line, context ids and `extra` fields inlined"""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        entry.update({key: value for key, value in current_context().items() if value})

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc_value, _ = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "traceback": traceback.format_exception(*record.exc_info),
            }

        for key, value in vars(record).items():
            if key not in _STANDARD_ATTRS and not key.startswith("_"):
                entry[key] = value

        return json.dumps(entry, default=str)


class ContextualFormatter(logging.Formatter):
    """Plain-text formatter; exposes %(request_id)s, %(user_id)s, %(project_id)s"""

    def format(self, record: logging.LogRecord) -> str:
        for key, value in current_context().items():
            setattr(record, key, value or "-")
        return super().format(record)


class StudioTrackLogger(logging.Logger):
    """Logger with helpers for the structured events the API emits"""

    def log_auth_event(self, event: str, success: bool, user_email: Optional[str] = None,
                       reason: Optional[str] = None, **kwargs) -> None:
        outcome = "success" if success else "failed"
        message = " - ".join(part for part in (f"Auth {event}: {outcome}", user_email, reason) if part)
        self.log(
            logging.INFO if success else logging.WARNING,
            message,
            extra={
                "event_type": "auth",
                "auth_event": event,
                "auth_success": success,
                "user_email": user_email,
                "failure_reason": reason,
                **kwargs
            }
        )

    def log_activity(self, action: str, project_id: str, actor_id: str,
                     payload: Optional[Dict[str, Any]] = None) -> None:
        """Mirror of an activity_logs row"""
        self.info(
            f"[Activity] {action} project={project_id} actor={actor_id}",
            extra={
                "event_type": "activity",
                "activity_action": action,
                "activity_project_id": project_id,
                "activity_actor_id": actor_id,
                "activity_payload": payload or {},
            }
        )

    def log_error_with_context(self, error: Exception, context: Optional[str] = None) -> None:
        self.error(
            f"Error in {context}: {type(error).__name__}: {error}",
            exc_info=True,
            extra={
                "event_type": "error",
                "error_type": type(error).__name__,
                "error_context": context,
            }
        )


def _file_handler(formatter: logging.Formatter, backups: int) -> RotatingFileHandler:
    log_file = Path(settings.LOG_FILE)
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(log_file, maxBytes=LOG_FILE_MAX_BYTES, backupCount=backups)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(formatter)
    return handler


def setup_logging() -> StudioTrackLogger:
    """Configure the `studiotrack` logger for the current ENVIRONMENT"""
    logging.setLoggerClass(StudioTrackLogger)
    logger = logging.getLogger(LOGGER_NAME)
    logger.__class__ = StudioTrackLogger  # getLogger may predate setLoggerClass
    logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    logger.handlers.clear()

    json_logging = settings.ENVIRONMENT == "production"
    if json_logging:
        console_formatter = file_formatter = JSONFormatter()
        backups = 10
    else:
        console_formatter = ContextualFormatter("%(levelname)-8s | %(message)s")
        file_formatter = ContextualFormatter(
            "%(asctime)s | %(levelname)-8s | [%(request_id)s] [%(user_id)s] [%(project_id)s] | "
            "%(funcName)s:%(lineno)d | %(message)s"
        )
        backups = 5

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(logging.INFO)
    console.setFormatter(console_formatter)
    logger.addHandler(console)

    if settings.LOG_FILE:
        logger.addHandler(_file_handler(file_formatter, backups))

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    logger.debug(f"Logging initialized ({settings.ENVIRONMENT}, json={json_logging})")
    return logger


logger: StudioTrackLogger = setup_logging()


__all__ = [
    "logger",
    "setup_logging",
    "current_context",
    "set_request_id",
    "set_user_id",
    "set_project_id",
    "generate_request_id",
    "StudioTrackLogger",
]
