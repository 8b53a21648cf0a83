"""Application logging setup.

Logs are written as one JSON object per line to stdout and, when a log
directory is configured, to a rotating file as well. Context such as the
order id or client reference is attached by passing ``extra={"extra": {...}}``
to the logging call; those keys are merged into the top level of the record.
"""

import json
import logging
import logging.handlers
import os
from datetime import datetime, timezone


class JsonFormatter(logging.Formatter):
    """Format log records as JSON strings."""

    def format(self, record: logging.LogRecord) -> str:
        log_record = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        extra = getattr(record, "extra", None)
        if isinstance(extra, dict):
            log_record.update(extra)
        if record.exc_info:
            log_record["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(log_record, default=str)


def configure_logging(level="INFO", log_dir=None) -> None:
    """Configure the root logger with JSON output.

    Args:
        level: Level name or number for the root logger.
        log_dir: Optional directory for a rotating ``bliss_api.log`` file.
            Created if it does not exist.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger()
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    formatter = JsonFormatter()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(level)
    logger.addHandler(console_handler)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            filename=os.path.join(log_dir, "bliss_api.log"),
            maxBytes=5 * 1024 * 1024,  # 5 MB per file
            backupCount=3,
        )
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level)
        logger.addHandler(file_handler)
