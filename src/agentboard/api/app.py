"""FastAPI application setup."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from agentboard import __version__
from agentboard.api.dependencies import (
    close_all,
    init_diagnostics,
    init_dispatcher,
    init_event_manager,
    init_router,
    init_state_machine,
    init_state_store,
)
from agentboard.api.models import APIResponse
from agentboard.api.routes import conversations, diagnostics, events, runs, tickets, triggers
from agentboard.board import ColumnStateMachine, StoreError, TicketNotFoundError
from agentboard.config import Settings
from agentboard.conversations import ConversationRouter
from agentboard.logging import get_logger
from agentboard.orchestrator import Dispatcher, RunOrchestrator
from agentboard.runtime import HttpJobRunner
from agentboard.triggers import TriggerDeduplicator

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from agentboard.runtime import JobRunner

logger = get_logger("api")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings: Settings = app.state.settings

    store = init_state_store(settings.db_path)
    event_manager = init_event_manager()
    diagnostics = init_diagnostics()

    router = ConversationRouter(event_manager=event_manager, diagnostics=diagnostics)
    init_router(router)
    state_machine = ColumnStateMachine(store, diagnostics=diagnostics)
    init_state_machine(state_machine)

    runner: JobRunner | None = app.state.runner
    owned_runner: HttpJobRunner | None = None
    if runner is None:
        owned_runner = HttpJobRunner(
            base_url=settings.runtime_base_url,
            api_key=settings.runtime_api_key,
            repository_url=settings.repository_url,
            default_branch=settings.default_branch,
        )
        runner = owned_runner

    orchestrator = RunOrchestrator(
        state_machine=state_machine,
        store=store,
        runner=runner,
        router=router,
        policy=settings.poll_policy(),
        default_branch=settings.default_branch,
        event_manager=event_manager,
    )
    dispatcher = Dispatcher(
        deduplicator=TriggerDeduplicator(settings.dedup_window, diagnostics=diagnostics),
        router=router,
        orchestrator=orchestrator,
    )
    init_dispatcher(dispatcher)
    logger.info("agentboard API started (db: %s)", settings.db_path)

    yield

    await dispatcher.shutdown()
    if owned_runner is not None:
        await owned_runner.aclose()
    close_all()


def create_app(settings: Settings | None = None, runner: JobRunner | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to use. Read from the environment when omitted.
        runner: Job runner to use. An HttpJobRunner is built from settings
            when omitted.
    """
    app = FastAPI(
        title="agentboard API",
        description="REST API for agentboard - agent run orchestration for a ticket board",
        version=__version__,
        lifespan=lifespan,
    )

    # Config for the lifespan manager
    app.state.settings = settings or Settings.from_env()
    app.state.runner = runner

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(TicketNotFoundError)
    async def ticket_not_found_handler(
        _request: Request, exc: TicketNotFoundError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=APIResponse[None](data=None, error=str(exc)).model_dump(),
        )

    @app.exception_handler(StoreError)
    async def store_error_handler(_request: Request, exc: StoreError) -> JSONResponse:
        logger.error("Ticket store error: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=APIResponse[None](data=None, error="Internal server error").model_dump(),
        )

    app.include_router(triggers.router, prefix="/api/v1")
    app.include_router(runs.router, prefix="/api/v1")
    app.include_router(conversations.router, prefix="/api/v1")
    app.include_router(diagnostics.router, prefix="/api/v1")
    app.include_router(tickets.router, prefix="/api/v1")
    app.include_router(events.router, prefix="/api/v1")

    return app
