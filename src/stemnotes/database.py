"""Database — the single shared SQLite engine, guarded by a lock."""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any

from sqlalchemy import event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

from stemnotes.exceptions import StorageError
from stemnotes.models import Note, NoteEmbedding

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy import Engine

logger = logging.getLogger(__name__)

_MEMORY_URLS = {"sqlite://", "sqlite:///:memory:"}


class Database:
    """Owns the SQLite engine and serialises access to it.

    Every unit of work goes through :meth:`session`, which holds the lock
    for the lifetime of the session.  Callers must not await network I/O
    while inside a session.

    In-memory databases are backed by a single connection
    (``StaticPool``) shared across threads, so work pushed to a worker
    thread sees the same data as the caller.
    """

    def __init__(self, url: str = "sqlite://", *, echo: bool = False) -> None:
        self._url = url
        self._is_memory = url in _MEMORY_URLS
        kwargs: dict[str, Any] = {"echo": echo}
        if url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
            if self._is_memory:
                kwargs["poolclass"] = StaticPool

        self._engine: Engine = create_engine(url, **kwargs)
        self._lock = threading.Lock()

        if url.startswith("sqlite"):
            event.listen(self._engine, "connect", self._on_sqlite_connect)

    @classmethod
    def from_path(cls, path: str | Path, *, echo: bool = False) -> Database:
        """Open (or create) a SQLite database file at *path*."""
        db_path = Path(path).expanduser()
        db_path.parent.mkdir(parents=True, exist_ok=True)
        return cls(f"sqlite:///{db_path}", echo=echo)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def init(self) -> None:
        """Create the ``notes`` and ``note_embeddings`` tables if missing."""
        tables = [Note.__table__, NoteEmbedding.__table__]  # type: ignore[attr-defined]
        with self._lock:
            try:
                SQLModel.metadata.create_all(self._engine, tables=tables)
            except SQLAlchemyError as exc:
                msg = f"Failed to initialise database {self._url}: {exc}"
                raise StorageError(msg) from exc
        logger.debug("Database initialised at %s", self._url)

    def close(self) -> None:
        """Dispose of the engine's connection pool."""
        self._engine.dispose()

    # ------------------------------------------------------------------
    # Exclusive access
    # ------------------------------------------------------------------

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Yield a session while holding the database lock.

        The session is not committed automatically.
        """
        with self._lock, Session(self._engine, expire_on_commit=False) as session:
            yield session

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def url(self) -> str:
        return self._url

    @property
    def is_memory(self) -> bool:
        return self._is_memory

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _on_sqlite_connect(self, dbapi_conn: Any, _record: Any) -> None:
        cursor = dbapi_conn.cursor()
        try:
            if not self._is_memory:
                cursor.execute("PRAGMA journal_mode = WAL")
            cursor.execute("PRAGMA foreign_keys = ON")
        finally:
            cursor.close()
