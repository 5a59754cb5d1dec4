"""Ticket endpoints."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from agentboard.api.dependencies import StateMachineDep, StateStoreDep
from agentboard.api.models import (
    APIResponse,
    MoveRequest,
    MoveResponse,
    TicketResponse,
    ticket_to_response,
)
from agentboard.board.exceptions import StoreError

router = APIRouter(prefix="/tickets", tags=["tickets"])


@router.get("/{ticket_id}", response_model=APIResponse[TicketResponse])
def get_ticket(ticket_id: str, store: StateStoreDep) -> APIResponse[TicketResponse]:
    """Get a ticket by ID."""
    ticket = store.get_ticket(ticket_id)
    return APIResponse(data=ticket_to_response(ticket))


@router.post("/{ticket_id}/move", response_model=APIResponse[MoveResponse])
def move_ticket(
    ticket_id: str,
    body: MoveRequest,
    store: StateStoreDep,
    state_machine: StateMachineDep,
) -> APIResponse[MoveResponse] | JSONResponse:
    """Move a ticket by hand (a card dragged on the board).

    Goes through the same compare-and-set move as agent runs. Returns 409 if
    the ticket is not in from_column (or its current column when omitted).
    """
    current = store.get_ticket(ticket_id)
    from_column = body.from_column if body.from_column is not None else current.column_id

    result = state_machine.attempt_move(ticket_id, from_column, body.to_column, body.move_type)
    if result.store_error:
        raise StoreError(result.reason or "Ticket store failure")

    response = MoveResponse(
        applied=result.applied,
        reason=result.reason,
        ticket=ticket_to_response(result.ticket) if result.ticket else None,
    )
    if not result.applied:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=APIResponse[MoveResponse](data=response, error=result.reason).model_dump(
                mode="json"
            ),
        )
    return APIResponse(data=response)
