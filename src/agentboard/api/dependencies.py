"""FastAPI dependencies for dependency injection."""

from __future__ import annotations

from collections.abc import Generator  # noqa: TC003
from typing import Annotated

from fastapi import Depends

from agentboard.board.state_machine import ColumnStateMachine
from agentboard.conversations.events import EventManager
from agentboard.conversations.router import ConversationRouter
from agentboard.diagnostics import Diagnostics
from agentboard.orchestrator.dispatch import Dispatcher
from agentboard.state_store import StateStore

# Global StateStore instance (initialized on app startup)
_state_store: StateStore | None = None


def init_state_store(db_path: str = "agentboard.db") -> StateStore:
    """Initialize the global StateStore instance."""
    global _state_store  # noqa: PLW0603
    _state_store = StateStore(db_path)
    return _state_store


def close_state_store() -> None:
    """Close the global StateStore instance."""
    global _state_store  # noqa: PLW0603
    if _state_store is not None:
        _state_store.close()
        _state_store = None


def get_state_store() -> Generator[StateStore, None, None]:
    """Dependency that provides the StateStore instance."""
    if _state_store is None:
        raise RuntimeError("StateStore not initialized. Call init_state_store() first.")
    yield _state_store


StateStoreDep = Annotated[StateStore, Depends(get_state_store)]

# Global EventManager instance
_event_manager: EventManager | None = None


def init_event_manager() -> EventManager:
    """Initialize the global EventManager instance."""
    global _event_manager  # noqa: PLW0603
    _event_manager = EventManager()
    return _event_manager


def get_event_manager() -> Generator[EventManager, None, None]:
    """Dependency that provides the EventManager instance."""
    if _event_manager is None:
        raise RuntimeError("EventManager not initialized. Call init_event_manager() first.")
    yield _event_manager


EventManagerDep = Annotated[EventManager, Depends(get_event_manager)]

# Global Diagnostics instance
_diagnostics: Diagnostics | None = None


def init_diagnostics() -> Diagnostics:
    """Initialize the global Diagnostics instance."""
    global _diagnostics  # noqa: PLW0603
    _diagnostics = Diagnostics()
    return _diagnostics


def get_diagnostics() -> Generator[Diagnostics, None, None]:
    """Dependency that provides the Diagnostics instance."""
    if _diagnostics is None:
        raise RuntimeError("Diagnostics not initialized. Call init_diagnostics() first.")
    yield _diagnostics


DiagnosticsDep = Annotated[Diagnostics, Depends(get_diagnostics)]

# Global ConversationRouter instance
_router: ConversationRouter | None = None


def init_router(router: ConversationRouter) -> None:
    """Initialize the global ConversationRouter instance."""
    global _router  # noqa: PLW0603
    _router = router


def get_router() -> Generator[ConversationRouter, None, None]:
    """Dependency that provides the ConversationRouter instance."""
    if _router is None:
        raise RuntimeError("ConversationRouter not initialized. Call init_router() first.")
    yield _router


RouterDep = Annotated[ConversationRouter, Depends(get_router)]

# Global ColumnStateMachine instance
_state_machine: ColumnStateMachine | None = None


def init_state_machine(state_machine: ColumnStateMachine) -> None:
    """Initialize the global ColumnStateMachine instance."""
    global _state_machine  # noqa: PLW0603
    _state_machine = state_machine


def get_state_machine() -> Generator[ColumnStateMachine, None, None]:
    """Dependency that provides the ColumnStateMachine instance."""
    if _state_machine is None:
        raise RuntimeError("ColumnStateMachine not initialized. Call init_state_machine() first.")
    yield _state_machine


StateMachineDep = Annotated[ColumnStateMachine, Depends(get_state_machine)]

# Global Dispatcher instance
_dispatcher: Dispatcher | None = None


def init_dispatcher(dispatcher: Dispatcher) -> None:
    """Initialize the global Dispatcher instance."""
    global _dispatcher  # noqa: PLW0603
    _dispatcher = dispatcher


def get_dispatcher() -> Generator[Dispatcher, None, None]:
    """Dependency that provides the Dispatcher instance."""
    if _dispatcher is None:
        raise RuntimeError("Dispatcher not initialized. Call init_dispatcher() first.")
    yield _dispatcher


DispatcherDep = Annotated[Dispatcher, Depends(get_dispatcher)]


def close_all() -> None:
    """Drop every global instance; the state store is closed."""
    global _event_manager, _diagnostics, _router, _state_machine, _dispatcher  # noqa: PLW0603
    close_state_store()
    _event_manager = None
    _diagnostics = None
    _router = None
    _state_machine = None
    _dispatcher = None
