"""Custom exceptions for the board and its ticket store."""


class BoardError(Exception):
    """Base exception for board errors."""


class TicketNotFoundError(BoardError):
    """Ticket with given ID does not exist."""


class StoreError(BoardError):
    """The ticket store failed (distinct from a missing ticket)."""


class StoreWriteError(StoreError):
    """A write to the ticket store failed."""


class TicketExistsError(BoardError):
    """Ticket with given ID already exists."""
