"""
core/guards.py — Helpers for request handlers that need the database.

Handlers acquire the database inside their own call, never at import or
decoration time, and answer with a 503 payload when it is unavailable.
"""

from __future__ import annotations

import functools
from typing import Any, Callable, Coroutine

from core import database
from core.models import ServiceUnavailable


def database_unavailable() -> ServiceUnavailable:
    """Return the standard response for "database not available"."""
    return ServiceUnavailable()


def requires_database(
    handler: Callable[..., Coroutine[Any, Any, Any]],
) -> Callable[..., Coroutine[Any, Any, Any]]:
    """
    Decorate an ``async`` handler so it receives the database as first arg.

    If no handle can be acquired the handler is skipped and
    :func:`database_unavailable` is returned instead.
    """

    @functools.wraps(handler)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        db = await database.get_manager().acquire_database()
        if db is None:
            return database_unavailable()
        return await handler(db, *args, **kwargs)

    return wrapper
