"""
Structured failure logging.

Failures inside batch work (embedding batches, evaluation questions) are
logged with their identifiers attached as record attributes. Values are
reduced to short strings first so an embedding vector or a whole chunk
never lands in a log line.

Dependencies: logging (stdlib)
System role: Logging helper functions
"""

import logging
from typing import Any

MAX_VALUE_LENGTH = 500


def safe_log_value(value: Any, max_length: int = MAX_VALUE_LENGTH) -> str:
    """
    Short printable form of a value for log attributes.

    Sequences and mappings are summarized by size; strings longer than
    max_length are cut with a note of their full length.
    """
    if value is None:
        return "None"
    if isinstance(value, (list, tuple)):
        return f"{type(value).__name__}({len(value)} items)"
    if isinstance(value, dict):
        return f"dict({len(value)} keys)"
    try:
        text = value if isinstance(value, str) else str(value)
    except Exception as e:
        return f"<unable to log: {type(e).__name__}>"
    if len(text) > max_length:
        return f"{text[:max_length]}... (truncated, {len(text)} total)"
    return text


def log_exception_with_context(
    logger: logging.Logger,
    message: str,
    exc: BaseException,
    **context,
) -> None:
    """
    Log exc at ERROR with context keys as record attributes.

    Args:
        logger: Logger to write to
        message: Log message
        exc: Failure being reported
        **context: Identifiers of the failed unit of work (run_id, document_id, ...)
    """
    extra = {key: safe_log_value(value) for key, value in context.items()}
    extra["error_type"] = type(exc).__name__
    extra["error_msg"] = safe_log_value(str(exc))
    logger.error(message, exc_info=exc, extra=extra)
