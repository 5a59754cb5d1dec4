"""Interface the column state machine needs from a ticket store."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from datetime import datetime

    from agentboard.board.models import Ticket


class TicketStore(Protocol):
    """Key/value + query store holding tickets.

    Implementations raise TicketNotFoundError for a missing ticket and
    StoreError (or StoreWriteError) for any failure of the store itself.
    """

    def get_ticket(self, ticket_id: str) -> Ticket:
        """Read a ticket by ID."""
        ...

    def max_position(self, column_id: str) -> int:
        """Highest position among tickets in a column, 0 if the column is empty."""
        ...

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

        Returns:
            True if the ticket was updated, False if its column had changed.
        """
        ...

    def create_ticket(
        self,
        ticket_id: str,
        title: str = "",
        body: str = "",
        column_id: str | None = None,
    ) -> Ticket:
        """Create a ticket, placed at the end of column_id if given."""
        ...

    def list_tickets(self, column_id: str | None = None) -> list[Ticket]:
        """List tickets ordered by position."""
        ...
