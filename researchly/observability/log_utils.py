"""
Structured logging helpers.

Log context for AI operations carries prompts, model output and document
bytes; these helpers keep such values short and never let formatting a
value break the log call itself.

Dependencies: logging (stdlib), researchly.core.exceptions
System role: Logging helper functions
"""

import logging
from typing import Any

from researchly.core.exceptions import ResearchlyException


def safe_log_value(value: Any, max_length: int = 500) -> str:
    """
    Render a value for a log record's extra fields.

    Containers and binary payloads are summarised by size instead of
    dumped; long strings are truncated.

    Args:
        value: Value to render
        max_length: Maximum rendered length before truncation

    Returns:
        str: Log-safe representation
    """
    try:
        if value is None:
            return "None"
        if isinstance(value, (bytes, bytearray)):
            return f"<{len(value)} bytes>"
        if isinstance(value, (list, tuple)):
            rendered = f"{type(value).__name__}({len(value)} items)"
        elif isinstance(value, dict):
            rendered = f"dict({len(value)} keys)"
        else:
            rendered = value if isinstance(value, str) else str(value)
    except Exception as e:
        return f"<unable to log: {type(e).__name__}>"

    if len(rendered) > max_length:
        return f"{rendered[:max_length]}... (truncated, {len(rendered)} total)"
    return rendered


def log_exception_with_context(
    logger: logging.Logger,
    message: str,
    exc: BaseException,
    **context,
) -> None:
    """
    Log a failure with its traceback and operation context.

    Application exceptions also contribute their error kind and details.

    Args:
        logger: Logger to write to
        message: Log message
        exc: The failure
        **context: Operation context (paper_id, operation, ...)
    """
    extra = {key: safe_log_value(val) for key, val in context.items()}
    extra["error_type"] = type(exc).__name__
    extra["error_msg"] = safe_log_value(str(exc))
    if isinstance(exc, ResearchlyException):
        extra["error_kind"] = exc.kind.value
        extra["error_details"] = safe_log_value(exc.details)
    logger.error(message, exc_info=exc, extra=extra)
