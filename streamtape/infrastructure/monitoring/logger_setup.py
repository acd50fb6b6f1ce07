"""Logging configuration for the streamtape CLI.

Diagnostics go to stderr so that command output on stdout stays pipeable.
Every handler masks the API key, which travels in the query string of each
request and would otherwise show up in logged URLs.
"""

import logging
import re
import sys
from logging.handlers import RotatingFileHandler
from typing import List, Optional, Union

DEFAULT_LOG_LEVEL = logging.WARNING
DEFAULT_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
LOG_FILE_BACKUP_COUNT = 3

# Third-party loggers never log below WARNING
NOISY_LOGGERS = ("httpx", "httpcore")

MASK = "***"
_KEY_PATTERN = re.compile(r"(\bkey['\"]?\s*[=:]\s*['\"]?)[^&\s'\",}]+", re.IGNORECASE)


def resolve_log_level(value: Union[str, int, None], default: int = DEFAULT_LOG_LEVEL) -> int:
    """Turns a configured level ("debug", "INFO", 10...) into a logging level.

    Unknown names fall back to ``default``.
    """
    if isinstance(value, int):
        return value
    if not value:
        return default
    level = logging.getLevelName(str(value).strip().upper())
    return level if isinstance(level, int) else default


def mask_api_key(text: str) -> str:
    """Replaces the value of every ``key=...`` / ``"key": ...`` pair with a mask."""
    return _KEY_PATTERN.sub(lambda m: m.group(1) + MASK, text)


class ApiKeyFilter(logging.Filter):
    """Masks API keys in formatted log messages."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        masked = mask_api_key(message)
        if masked != message:
            record.msg = masked
            record.args = None
        return True


def setup_logging(
    log_level: Union[str, int, None] = DEFAULT_LOG_LEVEL,
    log_format: str = DEFAULT_LOG_FORMAT,
    log_file: Optional[str] = None
) -> None:
    """Configures the root logger for the application.

    Args:
        log_level: Minimum level, as a logging constant or a level name.
        log_format: The format string for log messages.
        log_file: Optional path of a size-rotated log file.
    """
    level = resolve_log_level(log_level)
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(log_format)
    key_filter = ApiKeyFilter()

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    file_error = None
    if log_file:
        try:
            handlers.append(RotatingFileHandler(
                log_file,
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_FILE_BACKUP_COUNT,
                encoding='utf-8',
            ))
        except OSError as e:
            file_error = e

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        handler.addFilter(key_filter)
        root_logger.addHandler(handler)

    if file_error is not None:
        logging.error(f"Failed to set up file logging to {log_file}: {file_error}")

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    logging.debug(f"Logging configured. Level={logging.getLevelName(level)}, file={log_file}")
