"""
Logging setup module.

Configures application-wide logging with console and optional file handlers.
Supports both standard text format and structured JSON logging.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import TextIO

from pythonjsonlogger import jsonlogger

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class JSONFormatter(jsonlogger.JsonFormatter):
    """JSON log formatter with standard fields."""

    def add_fields(self, log_record: dict, record: logging.LogRecord, message_dict: dict):
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = self.formatTime(record)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["module"] = record.module
        log_record["function"] = record.funcName
        log_record["line"] = record.lineno


def setup_logging(
    level: str = "INFO",
    log_format: str = "text",
    log_file: Path | None = None,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
    stream: TextIO | None = None,
) -> logging.Logger:
    """
    Configure application logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
        log_format: "text" for human-readable, "json" for structured.
            The LOG_FORMAT environment variable forces "json" when set to it.
        log_file: Optional file path for log output.
        max_bytes: Max log file size before rotation.
        backup_count: Number of backup files to keep.
        stream: Console stream (stdout if not provided).

    Returns:
        logging.Logger: Configured root logger.
    """
    if os.environ.get("LOG_FORMAT", "").lower() == "json":
        log_format = "json"

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    # Clear existing handlers
    root_logger.handlers.clear()

    if log_format.lower() == "json":
        formatter = JSONFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
    else:
        formatter = logging.Formatter(TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    console_handler = logging.StreamHandler(stream or sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        log_file = Path(log_file)
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
        except OSError as e:
            root_logger.warning(f"Could not create file handler: {e}")

    # Reduce noise from third-party libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    root_logger.debug(f"Logging configured: level={level}, format={log_format}")
    return root_logger
