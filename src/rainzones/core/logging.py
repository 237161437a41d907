#!/usr/bin/env python3
"""
Centralized logging module for rainzones

Provides structured JSON logging for service deployments and a compact
human-readable console format for the CLI.
"""

import json
import logging
import os
import sys
from datetime import datetime, UTC

# Optional attributes callers attach through ``extra={...}``
EXTRA_FIELDS = ("stage", "frame", "zoom", "count", "error")


class StructuredFormatter(logging.Formatter):
    """JSON-structured log formatter with timestamps.

    Produces log entries as JSON objects with consistent fields:
    - timestamp: ISO 8601 format with UTC timezone
    - level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - logger: Logger name (e.g., rainzones.processing.contour)
    - message: The log message

    Pipeline code adds context via the `extra` parameter:
    - stage: Pipeline stage (catalog, tiles, mask, contour, simplify)
    - frame: UNIX timestamp of the radar frame being processed
    - zoom: Tile zoom level in use
    - count: Number of items produced by the stage
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON string."""
        log_entry = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for field in EXTRA_FIELDS:
            if hasattr(record, field):
                log_entry[field] = getattr(record, field)

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry)


class ConsoleFormatter(logging.Formatter):
    """Human-readable formatter for CLI output.

    Produces output in the format:
    [HH:MM:SS] <icon> <message>
    """

    LEVEL_ICONS = {
        "DEBUG": "\U0001f50d",  # Magnifying glass
        "INFO": "\U0001f326️",  # Sun behind rain cloud
        "WARNING": "⚠️",  # Warning sign
        "ERROR": "❌",  # Red X
        "CRITICAL": "\U0001f6a8",  # Police light
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format log record for console output."""
        icon = self.LEVEL_ICONS.get(record.levelname, "")
        timestamp = datetime.now().strftime("%H:%M:%S")
        message = record.getMessage()
        if getattr(record, "stage", None):
            message = f"{record.stage}: {message}"

        return f"[{timestamp}] {icon} {message}"


def setup_logging(
    level: str = "INFO",
    structured: bool = False,
    log_file: str | None = None,
) -> logging.Logger:
    """Configure logging for the rainzones package.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        structured: Use JSON structured output (default: human-readable)
        log_file: Optional file path for log output

    Returns:
        Root logger for rainzones

    Example:
        setup_logging(level="DEBUG", structured=True)
    """
    logger = logging.getLogger("rainzones")

    # Clear existing handlers to avoid duplicates on reconfiguration
    logger.handlers.clear()

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(numeric_level)
    logger.propagate = False

    formatter = StructuredFormatter() if structured else ConsoleFormatter()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(numeric_level)
    logger.addHandler(console_handler)

    if log_file:
        # Files always get JSON lines so they can be shipped as-is
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(StructuredFormatter())
        file_handler.setLevel(numeric_level)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a named logger for a specific module.

    Example:
        logger = get_logger(__name__)
        logger.info("Catalog fetched", extra={"stage": "catalog"})
    """
    return logging.getLogger(name)


def configure_from_env(env: dict | None = None) -> logging.Logger:
    """Configure logging from environment variables.

    Reads:
        RAINZONES_LOG_LEVEL: Log level (default: INFO)
        RAINZONES_LOG_FORMAT: "json" or "console" (default: console)
        RAINZONES_LOG_FILE: Optional log file path
    """
    env = os.environ if env is None else env

    return setup_logging(
        level=env.get("RAINZONES_LOG_LEVEL", "INFO"),
        structured=env.get("RAINZONES_LOG_FORMAT", "console") == "json",
        log_file=env.get("RAINZONES_LOG_FILE"),
    )
