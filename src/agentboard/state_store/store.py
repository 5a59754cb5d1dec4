"""StateStore - SQLite-backed ticket store."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from agentboard.board.exceptions import (
    StoreError,
    StoreWriteError,
    TicketExistsError,
    TicketNotFoundError,
)
from agentboard.board.frontmatter import rewrite_kanban_header
from agentboard.logging import get_logger
from agentboard.state_store.database import Database
from agentboard.state_store.models import TicketRecord

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from agentboard.board.models import Ticket

logger = get_logger("state_store")


class StateStore:
    """Ticket store backed by SQLite.

    Implements the TicketStore interface used by the column state machine.
    Every method opens and closes its own session, so the store can be
    shared between threads.
    """

    def __init__(self, db_path: str = "agentboard.db") -> None:
        """Initialize the store, creating tables if they don't exist.

        Args:
            db_path: Path to SQLite database file.
        """
        self._db = Database(db_path)
        self._db.ensure_schema()

    def close(self) -> None:
        """Close the database connection."""
        self._db.close()

    def create_ticket(
        self,
        ticket_id: str,
        title: str = "",
        body: str = "",
        column_id: str | None = None,
    ) -> Ticket:
        """Create a ticket.

        A ticket created in a column is placed at the end of it.

        Args:
            ticket_id: Display ID (e.g. "0071").
            title: Human-readable title.
            body: Markdown body.
            column_id: Initial column, or None for an unplaced ticket.

        Returns:
            The created ticket.

        Raises:
            TicketExistsError: If a ticket with this ID exists.
            StoreWriteError: If the write fails.
        """
        session = self._db.get_session()
        try:
            position = 0
            moved_at = None
            if column_id:
                position = self._max_position(session, column_id) + 1
                moved_at = datetime.now(UTC)
                body = rewrite_kanban_header(body, column_id, position, moved_at)
            record = TicketRecord(
                id=ticket_id,
                title=title,
                column_id=column_id,
                position=position,
                body=body,
                moved_at=moved_at,
            )
            session.add(record)
            session.commit()
            return record.to_ticket()
        except IntegrityError as e:
            session.rollback()
            raise TicketExistsError(f"Ticket '{ticket_id}' already exists") from e
        except SQLAlchemyError as e:
            session.rollback()
            raise StoreWriteError(f"Failed to create ticket {ticket_id}: {e}") from e
        finally:
            session.close()

    def get_ticket(self, ticket_id: str) -> Ticket:
        """Get a ticket by ID.

        Raises:
            TicketNotFoundError: If the ticket doesn't exist.
            StoreError: If the read fails.
        """
        session = self._db.get_session()
        try:
            record = session.get(TicketRecord, ticket_id)
            if record is None:
                raise TicketNotFoundError(f"Ticket '{ticket_id}' not found")
            return record.to_ticket()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to read ticket {ticket_id}: {e}") from e
        finally:
            session.close()

    def list_tickets(self, column_id: str | None = None) -> list[Ticket]:
        """List tickets, optionally only those in one column, by position."""
        session = self._db.get_session()
        try:
            stmt = select(TicketRecord).order_by(TicketRecord.position, TicketRecord.id)
            if column_id is not None:
                stmt = stmt.where(TicketRecord.column_id == column_id)
            return [record.to_ticket() for record in session.execute(stmt).scalars()]
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to list tickets: {e}") from e
        finally:
            session.close()

    def max_position(self, column_id: str) -> int:
        """Highest position in a column, 0 if the column is empty."""
        session = self._db.get_session()
        try:
            return self._max_position(session, column_id)
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to read positions of {column_id}: {e}") from e
        finally:
            session.close()

    def compare_and_move(
        self,
        ticket_id: str,
        expected_column: str | None,
        column_id: str,
        position: int,
        moved_at: datetime,
        body: str | None = None,
    ) -> bool:
        """Move a ticket only if it is still in expected_column.

        The column check and the write are a single UPDATE statement.

        Returns:
            True if the row was updated, False if its column had changed.

        Raises:
            StoreWriteError: If the write fails.
        """
        if expected_column is None:
            column_matches = TicketRecord.column_id.is_(None)
        else:
            column_matches = TicketRecord.column_id == expected_column
        values: dict[str, object] = {
            "column_id": column_id,
            "position": position,
            "moved_at": moved_at,
        }
        if body is not None:
            values["body"] = body

        session = self._db.get_session()
        try:
            result = session.execute(
                update(TicketRecord)
                .where(TicketRecord.id == ticket_id, column_matches)
                .values(**values)
            )
            session.commit()
            return bool(result.rowcount == 1)  # type: ignore[attr-defined]
        except SQLAlchemyError as e:
            session.rollback()
            logger.error("Write of ticket %s failed: %s", ticket_id, e)
            raise StoreWriteError(f"Failed to move ticket {ticket_id}: {e}") from e
        finally:
            session.close()

    @staticmethod
    def _max_position(session: Session, column_id: str) -> int:
        stmt = select(func.max(TicketRecord.position)).where(TicketRecord.column_id == column_id)
        return session.execute(stmt).scalar() or 0
