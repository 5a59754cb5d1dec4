"""State Store - persistent ticket storage."""

from agentboard.state_store.database import Database
from agentboard.state_store.models import TicketRecord
from agentboard.state_store.store import StateStore

__all__ = [
    "Database",
    "StateStore",
    "TicketRecord",
]
