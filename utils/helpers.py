"""
Utility functions and helpers for the AI Visibility Scanner.

This module provides common utility functions used across different components
of the application, including identifier generation and the best-effort
combinator used for optional sub-tasks.
"""

import logging
import re
import uuid
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from typing import Any, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def generate_report_id() -> str:
    """
    Generate a unique report identifier.

    Returns:
        str: Unique ID as a string in UUID4 format

    Example:
        >>> generate_report_id()
        '550e8400-e29b-41d4-a716-446655440000'
    """
    return str(uuid.uuid4())


def truncate_text(text: str, max_length: int = 100, suffix: str = "...") -> str:
    """
    Truncate text to a maximum length with optional suffix.

    Args:
        text: Text to truncate
        max_length: Maximum length of the output (default: 100)
        suffix: Suffix to append when truncating (default: "...")

    Returns:
        str: Truncated text with suffix if needed

    Example:
        >>> truncate_text("This is a very long text", max_length=10)
        'This is...'
        >>> truncate_text("Short", max_length=10)
        'Short'
    """
    if len(text) <= max_length:
        return text
    return text[:max_length - len(suffix)] + suffix


def strip_code_fences(text: str) -> str:
    """Remove a surrounding ``` / ```json fence from LLM output."""
    text = text.strip()
    text = re.sub(r"^```[a-zA-Z]*\s*", "", text)
    text = re.sub(r"\s*```$", "", text)
    return text.strip()


def best_effort(
    label: str,
    func: Callable[..., T],
    *args: Any,
    default: Optional[T] = None,
    timeout: Optional[float] = None,
    **kwargs: Any
) -> Optional[T]:
    """
    Run an optional sub-task, returning `default` instead of raising.

    Used for work that may enrich a scan but must never fail it (site
    context, category classification, content preview, persistence).

    Args:
        label: Name used in log messages
        func: Callable to run
        default: Value returned on failure or timeout
        timeout: Optional wall-clock limit in seconds

    Returns:
        The callable's result, or `default`
    """
    try:
        if timeout is None:
            return func(*args, **kwargs)

        executor = ThreadPoolExecutor(max_workers=1)
        try:
            future = executor.submit(func, *args, **kwargs)
            return future.result(timeout=timeout)
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

    except FutureTimeoutError:
        logger.warning(f"⚠️  {label} timed out after {timeout}s")
    except Exception as e:
        logger.warning(f"⚠️  {label} failed: {e}")
    return default
