"""Secure logging utilities for dupcheck.

Provides sanitized logging that removes sensitive information like tokens,
emails, and API keys before outputting to logs.  Components accept an
optional ``ContextLogger`` so tests can inject their own sink instead of
capturing output.
"""
import json
import logging
import re
from typing import Any, Optional

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

logging.basicConfig(
    level=logging.INFO,
    format=DEFAULT_FORMAT,
    datefmt='%Y-%m-%d %H:%M:%S'
)

logger = logging.getLogger('dupcheck')


def configure_logging(level: str = "INFO", fmt: Optional[str] = None) -> None:
    """Apply LOG_LEVEL and LOG_FORMAT to the dupcheck logger."""
    logger.setLevel(level.upper())
    if fmt:
        formatter = logging.Formatter(fmt, datefmt='%Y-%m-%d %H:%M:%S')
        for handler in logging.getLogger().handlers:
            handler.setFormatter(formatter)


def sanitize_text(text: str) -> str:
    """Remove sensitive information from text.

    Args:
        text: Input text that may contain sensitive data

    Returns:
        Sanitized text with sensitive patterns replaced
    """
    if not text:
        return text

    # Email addresses
    text = re.sub(r'[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}', '<email>', text)

    # API keys (OpenAI, Azure subscription keys, Weaviate keys)
    text = re.sub(r'sk-[a-zA-Z0-9_-]{20,}', '<api-key>', text)
    text = re.sub(r'[a-zA-Z0-9]{32,}', '<token>', text)

    # Endpoints may carry deployment names or keys in the query string
    text = re.sub(r'https?://[^\s"]+', '<url>', text)

    return text


def safe_json(obj: Any, max_length: int = 1000) -> str:
    """Safely serialize object to JSON with sensitive data sanitized.

    Args:
        obj: Object to serialize
        max_length: Maximum length of output string

    Returns:
        Sanitized JSON string
    """
    try:
        json_str = json.dumps(obj, indent=2, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        return "<unable to serialize>"

    sanitized = sanitize_text(json_str)
    if len(sanitized) > max_length:
        sanitized = sanitized[:max_length] + "... [truncated]"
    return sanitized


class ContextLogger:
    """Thin wrapper that appends sanitized keyword context to log lines."""

    def __init__(self, base: Optional[logging.Logger] = None):
        self._base = base or logger

    def _emit(self, level: int, message: str, context: dict) -> None:
        if context:
            self._base.log(level, f"{message} | Context: {safe_json(context)}")
        else:
            self._base.log(level, message)

    def info(self, message: str, **kwargs) -> None:
        self._emit(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs) -> None:
        self._emit(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs) -> None:
        self._emit(logging.ERROR, message, kwargs)

    def debug(self, message: str, **kwargs) -> None:
        self._emit(logging.DEBUG, message, kwargs)


default_logger = ContextLogger()


def get_logger(name: Optional[str] = None) -> ContextLogger:
    """Return a ContextLogger for ``dupcheck`` or one of its children."""
    if not name:
        return default_logger
    return ContextLogger(logger.getChild(name))


def log_info(message: str, **kwargs) -> None:
    """Log info message with optional sanitized context."""
    default_logger.info(message, **kwargs)


def log_warning(message: str, **kwargs) -> None:
    """Log warning message with optional sanitized context."""
    default_logger.warning(message, **kwargs)


def log_error(message: str, **kwargs) -> None:
    """Log error message with optional sanitized context."""
    default_logger.error(message, **kwargs)


def log_agent_progress(stage: str, **kwargs) -> None:
    """Log pipeline progress through different stages."""
    log_info(f"Progress: {stage}", **kwargs)
