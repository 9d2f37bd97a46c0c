"""PII-safe logging utilities for songfinder.

Log lines routinely contain request URLs, headers and user-typed queries. This
module keeps contact addresses (e.g. from the User-Agent) and credentials out of
the output:
- Sensitive field redaction
- E-mail address scrubbing
- Rich console handler setup for the CLI
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import IO, Any

from rich.console import Console
from rich.logging import RichHandler

# Fields that should be redacted in logs
REDACT_FIELDS = frozenset(
    {
        "password",
        "secret",
        "token",
        "api_key",
        "apikey",
        "auth",
        "authorization",
        "cookie",
        "credential",
        "access_token",
        "client_secret",
    }
)

EMAIL_PATTERN = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")


def redact_value(value: str, visible_chars: int = 4) -> str:
    """Redact a sensitive value, showing only first few characters.

    Args:
        value: Value to redact
        visible_chars: Number of characters to show

    Returns:
        Redacted string (e.g., "sk-a***")
    """
    if len(value) <= visible_chars:
        return "***"
    return f"{value[:visible_chars]}***"


def redact_dict(
    data: Mapping[str, Any],
    redact_fields: frozenset[str] | None = None,
) -> dict[str, Any]:
    """Recursively redact sensitive fields in a mapping.

    Args:
        data: Mapping to redact (e.g. request headers)
        redact_fields: Set of field names to redact (case-insensitive)

    Returns:
        New dictionary with sensitive fields redacted
    """
    if redact_fields is None:
        redact_fields = REDACT_FIELDS

    result: dict[str, Any] = {}
    for key, value in data.items():
        key_lower = key.lower()
        should_redact = key_lower in redact_fields or any(
            field in key_lower for field in redact_fields
        )

        if should_redact and isinstance(value, str):
            result[key] = redact_value(value)
        elif isinstance(value, Mapping):
            result[key] = redact_dict(value, redact_fields)
        elif isinstance(value, list):
            result[key] = [
                redact_dict(item, redact_fields) if isinstance(item, Mapping) else item
                for item in value
            ]
        else:
            result[key] = value

    return result


def sanitize_message(message: str) -> str:
    """Replace e-mail addresses in a log message with a marker."""
    return EMAIL_PATTERN.sub("[EMAIL]", message)


class SafeLogFormatter(logging.Formatter):
    """Log formatter that scrubs e-mail addresses from messages and arguments."""

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        sanitize_messages: bool = True,
    ):
        super().__init__(fmt, datefmt)
        self.sanitize_messages = sanitize_messages

    def format(self, record: logging.LogRecord) -> str:
        if not self.sanitize_messages:
            return super().format(record)

        # Work on a copy so other handlers see the original record
        record = logging.makeLogRecord(record.__dict__)
        record.msg = sanitize_message(str(record.msg))
        if record.args:
            record.args = self._sanitize_args(record.args)

        return super().format(record)

    def _sanitize_args(self, args: tuple[Any, ...] | Mapping[str, Any]) -> tuple[Any, ...] | dict[str, Any]:
        if isinstance(args, Mapping):
            return {k: self._sanitize_value(v) for k, v in args.items()}
        return tuple(self._sanitize_value(arg) for arg in args)

    @staticmethod
    def _sanitize_value(value: Any) -> Any:
        if isinstance(value, str):
            return sanitize_message(value)
        return value


def configure_safe_logging(
    level: int = logging.INFO,
    format_string: str | None = None,
    sanitize: bool = True,
    stream: IO[str] | None = None,
) -> logging.Handler:
    """Configure root logging with a PII-safe stream handler.

    For embedding songfinder as a library without Rich. A handler installed by
    an earlier call is replaced.

    Args:
        level: Logging level
        format_string: Optional custom format string
        sanitize: Whether to scrub e-mail addresses
        stream: Stream to write to (default: stderr)

    Returns:
        The installed handler
    """
    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    handler = logging.StreamHandler(stream)
    handler.setFormatter(SafeLogFormatter(fmt=format_string, sanitize_messages=sanitize))

    root_logger = logging.getLogger()
    for existing in list(root_logger.handlers):
        if type(existing) is logging.StreamHandler and isinstance(existing.formatter, SafeLogFormatter):
            root_logger.removeHandler(existing)
    root_logger.setLevel(level)
    root_logger.addHandler(handler)
    return handler


def configure_rich_logging(
    level: int = logging.WARNING,
    sanitize: bool = True,
    show_time: bool = True,
    show_path: bool = False,
    console: Console | None = None,
) -> Console:
    """Route logging through a Rich handler on stderr.

    Replaces a Rich handler installed by an earlier call, so calling it twice
    (e.g. once per CLI invocation in tests) does not duplicate output.

    Returns:
        The Console used for regular (stdout) CLI output
    """
    handler = RichHandler(
        console=Console(stderr=True),
        show_time=show_time,
        show_path=show_path,
        markup=False,
        rich_tracebacks=False,
    )
    handler.setFormatter(SafeLogFormatter(fmt="%(message)s", sanitize_messages=sanitize))

    root_logger = logging.getLogger()
    for existing in list(root_logger.handlers):
        if isinstance(existing, RichHandler):
            root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    return console or Console()
