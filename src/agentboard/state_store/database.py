"""SQLite engine and sessions for the ticket store."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from agentboard.logging import get_logger
from agentboard.state_store.models import Base

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = get_logger("state_store")

MEMORY = ":memory:"

# Milliseconds a writer waits on another connection's lock before failing
BUSY_TIMEOUT_MS = 5000


def _on_connect(dbapi_connection: object, _connection_record: object) -> None:
    cursor = dbapi_connection.cursor()  # type: ignore[attr-defined]
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute(f"PRAGMA busy_timeout={BUSY_TIMEOUT_MS}")
    cursor.close()


def build_engine(db_path: str) -> Engine:
    """Engine for a ticket database file, or a shared in-memory database.

    Connections may be used from any thread: the API runs store calls in
    worker threads. An in-memory database lives on a single shared connection.
    """
    if db_path == MEMORY:
        engine = create_engine(
            "sqlite://",
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    else:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        engine = create_engine(f"sqlite:///{db_path}", connect_args={"check_same_thread": False})
    event.listen(engine, "connect", _on_connect)
    return engine


class Database:
    """Owns the engine and hands out short-lived sessions."""

    def __init__(self, db_path: str = "agentboard.db") -> None:
        self.db_path = db_path
        self.engine = build_engine(db_path)
        self._sessions = sessionmaker(bind=self.engine, expire_on_commit=False)
        logger.debug("Opened ticket database %s", db_path)

    def ensure_schema(self) -> None:
        """Create the tickets table if it is missing."""
        Base.metadata.create_all(self.engine)

    def get_session(self) -> Session:
        return self._sessions()

    @property
    def journal_mode(self) -> str:
        """SQLite journal mode in effect, e.g. ``"wal"``."""
        with self.engine.connect() as conn:
            return str(conn.execute(text("PRAGMA journal_mode")).scalar())

    def close(self) -> None:
        """Release pooled connections. The engine reconnects if used again."""
        self.engine.dispose()
