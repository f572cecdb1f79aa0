"""Failure logging for route handlers.

Wraps an endpoint so that every exception escaping it is logged with the
handler's module, name and the error message, then re-raised untouched for
the exception handlers to translate.
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])


def log_failures(func: F) -> F:
    """Log and re-raise any exception raised by the async handler *func*."""

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await func(*args, **kwargs)
        except Exception as exc:
            logger.warning(
                "Exception occurred in %s at %s with cause: [%s: %s]",
                func.__module__,
                func.__qualname__,
                type(exc).__name__,
                exc,
                exc_info=exc,
            )
            raise

    return wrapper  # type: ignore[return-value]
