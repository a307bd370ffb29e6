import logging
import queue
import sqlite3
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

from atbat_predictor.db.connection import DEFAULT_BUSY_TIMEOUT_MS, create_connection

logger = logging.getLogger(__name__)

DEFAULT_CHECKOUT_TIMEOUT = 10.0


class ConnectionPool:
    """A fixed set of SQLite connections shared by the sync thread and CLI callers.

    Connections are opened eagerly (which also runs migrations) and handed out
    through a queue. Checkout waits at most ``checkout_timeout`` seconds so a
    stuck writer can never hang a sync pass indefinitely.
    """

    def __init__(
        self,
        path: str | Path,
        *,
        size: int = 5,
        checkout_timeout: float = DEFAULT_CHECKOUT_TIMEOUT,
        busy_timeout_ms: int = DEFAULT_BUSY_TIMEOUT_MS,
    ) -> None:
        if size < 1:
            raise ValueError(f"pool size must be positive, got {size}")
        self._checkout_timeout = checkout_timeout
        self._closed = False
        self._connections = [
            create_connection(path, check_same_thread=False, busy_timeout_ms=busy_timeout_ms) for _ in range(size)
        ]
        self._idle: queue.Queue[sqlite3.Connection] = queue.Queue(maxsize=size)
        for conn in self._connections:
            self._idle.put_nowait(conn)
        logger.debug("Opened %d connection(s) to %s", size, path)

    @property
    def available(self) -> int:
        return self._idle.qsize()

    def get(self, *, timeout: float | None = None) -> sqlite3.Connection:
        """Check out a connection.

        Raises RuntimeError once the pool is closed and TimeoutError if none
        frees up within *timeout* (the pool's checkout timeout by default).
        """
        if self._closed:
            raise RuntimeError("Connection pool is closed")
        wait = self._checkout_timeout if timeout is None else timeout
        try:
            return self._idle.get(timeout=wait)
        except queue.Empty:
            logger.warning("No pooled connection freed up within %.1fs", wait)
            raise TimeoutError(f"No connection available after {wait:.1f}s") from None

    def release(self, conn: sqlite3.Connection) -> None:
        if self._closed:
            conn.close()
            return
        self._idle.put_nowait(conn)

    @contextmanager
    def connection(self) -> Generator[sqlite3.Connection]:
        """Borrow a connection for one unit of work; anything left uncommitted is rolled back."""
        conn = self.get()
        try:
            yield conn
        finally:
            conn.rollback()
            self.release(conn)

    def close_all(self) -> None:
        self._closed = True
        while True:
            try:
                self._idle.get_nowait()
            except queue.Empty:
                break
        for conn in self._connections:
            conn.close()
        logger.debug("Closed %d pooled connection(s)", len(self._connections))
