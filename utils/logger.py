"""
Centralized logging configuration for the aggregation service.

Structured JSON logs are written to rotating files so provider failures,
browser retries and aggregation decisions can be traced per request:
- app.log for INFO and above
- error.log for ERROR and above
- debug.log when LOG_LEVEL=DEBUG
- optional stderr output for errors (LOG_TO_CONSOLE=true)
"""

import json
import logging
import logging.handlers
import os
import re
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

# Query-string credentials, e.g. the browser endpoint "wss://host?token=..."
SECRET_PARAM_PATTERN = re.compile(
    r"(?i)\b(token|access_token|api_key|apikey|key|password)=[^&\s'\"\\]+"
)


def redact_secrets(text: str) -> str:
    """Mask credential values carried in URLs or messages."""
    return SECRET_PARAM_PATTERN.sub(r"\1=***", text)


class JsonFormatter(logging.Formatter):
    """Render log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Structured context passed as extra={"extra_fields": {...}}
        if hasattr(record, "extra_fields"):
            log_data.update(record.extra_fields)

        return redact_secrets(json.dumps(log_data, default=str))


class RedactingFormatter(logging.Formatter):
    """Plain-text formatter that masks credentials."""

    def format(self, record: logging.LogRecord) -> str:
        return redact_secrets(super().format(record))


class LoggerConfig:
    """
    Process-wide logger setup.
    """

    LOG_DIR = Path(os.getenv("LOG_DIR", "logs"))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    LOG_TO_CONSOLE = os.getenv("LOG_TO_CONSOLE", "false").lower() == "true"
    MAX_BYTES = 5 * 1024 * 1024  # 5MB per file
    BACKUP_COUNT = 3

    _initialized = False

    @classmethod
    def _file_handler(cls, filename: str, level: int, formatter: logging.Formatter):
        handler = logging.handlers.RotatingFileHandler(
            cls.LOG_DIR / filename,
            maxBytes=cls.MAX_BYTES,
            backupCount=cls.BACKUP_COUNT,
            encoding="utf-8",
        )
        handler.setLevel(level)
        handler.setFormatter(formatter)
        return handler

    @classmethod
    def setup_logging(cls) -> None:
        """
        Configure the root logger once per process.
        """
        if cls._initialized:
            return

        cls.LOG_DIR.mkdir(parents=True, exist_ok=True)

        root_logger = logging.getLogger()
        root_logger.setLevel(getattr(logging, cls.LOG_LEVEL, logging.INFO))
        root_logger.handlers.clear()

        json_formatter = JsonFormatter()

        root_logger.addHandler(cls._file_handler("app.log", logging.INFO, json_formatter))
        root_logger.addHandler(cls._file_handler("error.log", logging.ERROR, json_formatter))

        if cls.LOG_LEVEL == "DEBUG":
            root_logger.addHandler(cls._file_handler("debug.log", logging.DEBUG, json_formatter))

        if cls.LOG_TO_CONSOLE:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(logging.ERROR)
            console_handler.setFormatter(
                RedactingFormatter(
                    fmt="[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
                    datefmt="%Y-%m-%d %H:%M:%S",
                )
            )
            root_logger.addHandler(console_handler)

        # Playwright and httpx are chatty at INFO
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)

        cls._initialized = True

        logging.getLogger(__name__).info(
            "Logging system initialized",
            extra={
                "extra_fields": {
                    "log_level": cls.LOG_LEVEL,
                    "log_dir": str(cls.LOG_DIR),
                    "console_logging": cls.LOG_TO_CONSOLE,
                }
            },
        )

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        if not cls._initialized:
            cls.setup_logging()
        return logging.getLogger(name)


def get_logger(name: str) -> logging.Logger:
    """
    Get a configured logger instance.

    Args:
        name: The name of the logger (typically __name__)

    Returns:
        Configured logger instance

    Example:
        >>> from utils.logger import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.warning("Provider degraded", extra={"extra_fields": {"provider": "news"}})
    """
    return LoggerConfig.get_logger(name)


LoggerConfig.setup_logging()
