"""
core/database.py — Lazily-initialised MongoDB connection shared by the process.

Provides the ``ConnectionManager`` that owns the single client session and the
process-wide ``get_database()`` accessor used by request handlers and scripts.

Importing this module never touches the network. The client is built the
first time a caller awaits ``acquire_database()``; every later (or concurrent)
caller reuses that same attempt.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Any, Callable, Optional

from pymongo import AsyncMongoClient

from core.config import DB_NAME, get_settings
from core.models import ConnectionState, DatabaseHealth

if TYPE_CHECKING:
    from pymongo.asynchronous.database import AsyncDatabase

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Holds at most one in-flight-or-completed connection attempt."""

    def __init__(
        self,
        uri: Optional[str] = None,
        db_name: str = DB_NAME,
        client_factory: Optional[Callable[..., Any]] = None,
        timeout_ms: Optional[int] = None,
    ) -> None:
        """
        Parameters
        ----------
        uri : str, optional
            MongoDB connection string. ``None`` reads ``MONGODB_URI`` from the
            environment on first use.
        db_name : str
            Logical database returned by ``acquire_database``.
        client_factory : callable, optional
            Called as ``client_factory(uri, serverSelectionTimeoutMS=...)``.
            Defaults to :class:`pymongo.AsyncMongoClient`.
        timeout_ms : int, optional
            Server-selection timeout; defaults to the configured value.
        """
        self._uri = uri
        self._db_name = db_name
        self._client_factory = client_factory or AsyncMongoClient
        self._timeout_ms = timeout_ms
        self._client: Any = None
        self._pending: Optional[asyncio.Future] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._state = ConnectionState.UNINITIALIZED

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def db_name(self) -> str:
        return self._db_name

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def configured(self) -> bool:
        return bool(self._resolve_uri())

    def _resolve_uri(self) -> str:
        if self._uri is None:
            self._uri = get_settings().mongodb_uri
        return self._uri

    def _resolve_timeout(self) -> int:
        if self._timeout_ms is None:
            self._timeout_ms = get_settings().mongodb_timeout_ms
        return self._timeout_ms

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    async def _connect(self, uri: str) -> Any:
        """Build the client and force server selection with a ping."""
        client = None
        try:
            client = self._client_factory(
                uri, serverSelectionTimeoutMS=self._resolve_timeout()
            )
            self._client = client
            await client.admin.command("ping")
        except Exception as exc:
            logger.error("MongoDB connection error: %s", exc)
            if client is not None:
                await self._discard_client(client)
            raise
        return client

    async def _discard_client(self, client: Any) -> None:
        if self._client is client:
            self._client = None
        try:
            await client.close()
        except Exception as exc:
            logger.debug("Closing discarded MongoDB client raised: %s", exc)

    async def _discard_attempt(self, pending: asyncio.Future) -> None:
        """Empty the slot if it still holds ``pending`` and drop its client."""
        if self._pending is not pending:
            return
        self._pending = None
        self._loop = None
        self._state = ConnectionState.UNAVAILABLE
        if self._client is not None:
            await self._discard_client(self._client)

    def _is_stale(self, pending: asyncio.Future) -> bool:
        # A cancelled attempt never completes, and a client built on another
        # (closed) event loop cannot be used from this one.
        return pending.cancelled() or self._loop is not asyncio.get_running_loop()

    async def acquire_database(self) -> Optional[AsyncDatabase]:
        """
        Return the shared database handle, or ``None`` when unavailable.

        Never raises for configuration or connection problems: both are
        logged and reported as ``None``. A failed or cancelled attempt is
        dropped from the cache so the next call starts a fresh one.
        """
        uri = self._resolve_uri()
        if not uri:
            logger.warning("MONGODB_URI not configured")
            self._state = ConnectionState.UNAVAILABLE
            return None

        if self._pending is not None and self._is_stale(self._pending):
            logger.debug("Discarding stale MongoDB connection attempt")
            await self._discard_attempt(self._pending)

        if self._pending is None:
            # No await between the check and the assignment: concurrent
            # callers on this loop always see the stored attempt.
            self._state = ConnectionState.CONNECTING
            self._loop = asyncio.get_running_loop()
            self._pending = asyncio.ensure_future(self._connect(uri))
        else:
            logger.debug("Reusing cached MongoDB connection attempt")
        pending = self._pending

        try:
            client = await asyncio.shield(pending)
        except asyncio.CancelledError:
            # Only swallow cancellation of the shared attempt; a cancelled
            # caller must still see its own CancelledError.
            if not pending.cancelled():
                raise
            logger.warning("MongoDB connection attempt cancelled")
            await self._discard_attempt(pending)
            return None
        except Exception as exc:
            # Already logged once by the attempt itself.
            logger.debug("Joined MongoDB connection attempt failed: %s", exc)
            await self._discard_attempt(pending)
            return None

        if self._state is not ConnectionState.READY:
            self._state = ConnectionState.READY
            logger.info("Connected to MongoDB database %r", self._db_name)
        return client[self._db_name]

    async def health(self) -> DatabaseHealth:
        """Acquire the database and ping it; report the outcome."""
        db = await self.acquire_database()
        report = DatabaseHealth(
            configured=self.configured,
            state=self._state,
            database=self._db_name,
        )
        if db is None:
            return report

        t0 = time.perf_counter()
        try:
            await db.command("ping")
        except Exception as exc:
            logger.error("MongoDB ping failed: %s", exc)
            return report
        report.ok = True
        report.latency_ms = round((time.perf_counter() - t0) * 1000, 2)
        return report

    async def aclose(self) -> None:
        """Close the client (if any) and return to the uninitialised state."""
        pending, self._pending = self._pending, None
        self._loop = None
        if pending is not None and not pending.done():
            pending.cancel()
        client, self._client = self._client, None
        self._state = ConnectionState.UNINITIALIZED
        if client is not None:
            await client.close()
            logger.info("MongoDB client closed")


# ---------------------------------------------------------------------------
# Process-wide default
# ---------------------------------------------------------------------------

# importlib.reload() re-executes this module in the same namespace; the guard
# keeps an existing manager so a reload never opens a second connection.
try:
    _default_manager
except NameError:
    _default_manager: Optional[ConnectionManager] = None


def get_manager() -> ConnectionManager:
    """Return (and lazily create) the process-wide ConnectionManager."""
    global _default_manager
    if _default_manager is None:
        _default_manager = ConnectionManager()
    return _default_manager


def set_manager(manager: Optional[ConnectionManager]) -> None:
    """Install an explicitly constructed manager, or ``None`` to reset."""
    global _default_manager
    _default_manager = manager


async def get_database() -> Optional[AsyncDatabase]:
    """Return the shared database handle, or ``None`` when unavailable."""
    return await get_manager().acquire_database()
