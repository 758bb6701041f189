"""
Logging configuration.

Emits structured JSON lines on stdout so logs are machine readable in any
container platform. Structured context passed through `extra={...}` is
merged into the JSON object.
"""

import json
import logging
import os
from datetime import UTC, datetime


# Attributes every LogRecord carries; anything else came in through `extra`
_RESERVED_ATTRS = set(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__
) | {"message", "asctime", "taskName"}


class JsonFormatter(logging.Formatter):
    """
    Custom JSON log formatter.

    Ensures that logs are structured JSON with a stable set of top-level keys.
    """

    def format(self, record: logging.LogRecord) -> str:
        """
        Format the log record as a JSON string.

        Args:
            record: The log record to format.

        Returns:
            A JSON string representing the log record.
        """
        log_object = {
            "timestamp": datetime.now(UTC).isoformat(),
            "severity": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }

        # Add extra fields if they exist
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                log_object[key] = value

        if record.exc_info:
            log_object["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_object, default=str)


def setup_global_logging() -> None:
    """
    Configure global logging.

    Installs a single stdout handler with the JSON formatter on the root
    logger. The level comes from LOG_LEVEL (default INFO).
    """
    level = os.getenv("LOG_LEVEL", "INFO").upper()

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())

    root_logger = logging.getLogger()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    # Remove default handlers to avoid duplicate logs
    if len(root_logger.handlers) > 1:
        for h in root_logger.handlers[:-1]:
            root_logger.removeHandler(h)

    # httpx logs full request URLs at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
