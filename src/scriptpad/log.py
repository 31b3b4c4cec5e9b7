"""Logging configuration using structlog.

Output is one line per event with aligned 3-letter level names:
    12:30:45 INF run started command="kotlinc -script foo.kts"
    12:30:47 DBG caret moved offset=8
    12:30:48 ERR run failed error="interpreter not found"
"""

import logging
import sys
from datetime import datetime

import structlog

LEVEL_NAMES = {
    "debug": "DBG",
    "info": "INF",
    "warning": "WRN",
    "error": "ERR",
    "critical": "CRT",
}


def _level_to_3letter(logger, method_name, event_dict):
    """Convert log level to 3-letter abbreviation."""
    level = event_dict.get("level", method_name)
    event_dict["level"] = LEVEL_NAMES.get(level, level.upper()[:3])
    return event_dict


def _format_timestamp(logger, method_name, event_dict):
    """Add timestamp in HH:MM:SS format."""
    event_dict["timestamp"] = datetime.now().strftime("%H:%M:%S")
    return event_dict


def _render_kv_pairs(logger, method_name, event_dict):
    """Render event dict as 'timestamp LEVEL message key=value ...' string."""
    timestamp = event_dict.pop("timestamp", "")
    level = event_dict.pop("level", "???")
    event = event_dict.pop("event", "")

    kv_parts = []
    for key, value in event_dict.items():
        if key.startswith("_"):
            continue
        if isinstance(value, (list, tuple)):
            value = " ".join(str(v) for v in value)
        if isinstance(value, str) and (" " in value or not value):
            kv_parts.append(f'{key}="{value}"')
        else:
            kv_parts.append(f"{key}={value}")

    line = f"{timestamp} {level} {event}"
    if kv_parts:
        line = f"{line} {' '.join(kv_parts)}"
    return line


def configure(level: str = "INFO", debug: bool = False) -> None:
    """Configure structlog for console output.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
        debug: If True, sets level to DEBUG.
    """
    if debug:
        level = "DEBUG"

    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            _format_timestamp,
            _level_to_3letter,
            _render_kv_pairs,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level.upper(), logging.INFO)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger() -> structlog.BoundLogger:
    """Get a logger instance."""
    return structlog.get_logger()
