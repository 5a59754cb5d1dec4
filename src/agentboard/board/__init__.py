"""Board - columns, tickets and the column state machine."""

from agentboard.board.exceptions import (
    BoardError,
    StoreError,
    StoreWriteError,
    TicketExistsError,
    TicketNotFoundError,
)
from agentboard.board.models import (
    ALLOWED_TRANSITIONS,
    PIPELINE_ORDER,
    Column,
    MoveResult,
    MoveType,
    Ticket,
)
from agentboard.board.rules import PlannedMove, post_run_move, pre_run_move
from agentboard.board.state_machine import ColumnStateMachine
from agentboard.board.store import TicketStore

__all__ = [
    "ALLOWED_TRANSITIONS",
    "PIPELINE_ORDER",
    "BoardError",
    "Column",
    "ColumnStateMachine",
    "MoveResult",
    "MoveType",
    "PlannedMove",
    "StoreError",
    "StoreWriteError",
    "Ticket",
    "TicketExistsError",
    "TicketNotFoundError",
    "TicketStore",
    "post_run_move",
    "pre_run_move",
]
