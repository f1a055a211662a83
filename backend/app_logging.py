"""
FarmerAid - Structured JSON logging.
Import once at startup so handlers attach to the "farmeraid" logger tree.
"""
import json
import logging
import os
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Optional

SERVICE_NAME = "farmeraid-backend"
ROOT_LOGGER = "farmeraid"

# Optional attributes passed through `extra=` that end up in the JSON line
_EXTRA_FIELDS = ("request_id", "method", "path", "status_code", "duration_ms", "upstream", "status")


def json_formatter(record: logging.LogRecord) -> str:
    log = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "level": record.levelname,
        "service": SERVICE_NAME,
        "logger": record.name,
        "message": record.getMessage(),
    }
    for field in _EXTRA_FIELDS:
        if hasattr(record, field):
            log[field] = getattr(record, field)
    if record.exc_info:
        log["exception"] = logging.Formatter().formatException(record.exc_info)
    return json.dumps(log, default=str)


class JSONFormatter(logging.Formatter):
    def format(self, record):
        return json_formatter(record)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Child logger under the service root, e.g. get_logger("districts") -> farmeraid.districts."""
    if not name:
        return logging.getLogger(ROOT_LOGGER)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> logging.Logger:
    """Attach console (and optional rotating file) handlers to the service logger."""
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level.upper())

    if logger.handlers:
        return logger

    formatter = JSONFormatter()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(log_file, maxBytes=5 * 1024 * 1024, backupCount=5)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
