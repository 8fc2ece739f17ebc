"""
Logging for the Expense Tracker API.

Everything the application logs goes through the ``expense_tracker`` logger
tree; ``get_logger(__name__)`` hands out children of it. Levels come from the
environment so the same build can run quietly in production and verbosely
while reconciling budgets locally:

    APP_LOG_LEVEL           level for expense_tracker.* (INFO)
    THIRD_PARTY_LOG_LEVEL   cap for the libraries below (WARNING)
    LOG_FILE                also write to this file, rotated at 10MB
    SQL_ECHO                when "true", SQL statements stay visible
"""
import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import List, Optional

APP_LOGGER_NAME = "expense_tracker"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5

# Libraries used by the API, the migrations and the scripts
THIRD_PARTY_LOGGERS = [
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "alembic",
    "uvicorn.access",
    "uvicorn.error",
    "httpx",
    "urllib3",
    "faker",
]


def _parse_level(value: Optional[str], default: int) -> int:
    if not value:
        return default
    level = logging.getLevelName(value.strip().upper())
    return level if isinstance(level, int) else default


def _sql_echo_enabled() -> bool:
    return os.getenv("SQL_ECHO", "false").lower() == "true"


def _build_handlers(log_file: Optional[str]) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=LOG_FILE_MAX_BYTES,
            backupCount=LOG_FILE_BACKUPS,
        ))

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def setup_logging(
    app_log_level: Optional[str] = None,
    third_party_log_level: Optional[str] = None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the application logger. Safe to call more than once: handlers
    from an earlier call are closed and replaced.

    Explicit arguments win over the environment.
    """
    app_level = _parse_level(app_log_level or os.getenv("APP_LOG_LEVEL"), logging.INFO)
    third_party_level = _parse_level(
        third_party_log_level or os.getenv("THIRD_PARTY_LOG_LEVEL"), logging.WARNING
    )
    log_file = log_file or os.getenv("LOG_FILE")

    app_logger = logging.getLogger(APP_LOGGER_NAME)
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
        handler.close()

    app_logger.setLevel(app_level)
    for handler in _build_handlers(log_file):
        app_logger.addHandler(handler)
    app_logger.propagate = False

    for logger_name in THIRD_PARTY_LOGGERS:
        # The engine configures its own logger when echo is on
        if logger_name == "sqlalchemy.engine" and _sql_echo_enabled():
            continue
        logging.getLogger(logger_name).setLevel(third_party_level)

    return app_logger


def get_logger(name: str = APP_LOGGER_NAME) -> logging.Logger:
    """Logger under the application tree, e.g. ``expense_tracker.crud.crud_budget``."""
    if name == APP_LOGGER_NAME or name.startswith(APP_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{APP_LOGGER_NAME}.{name}")
