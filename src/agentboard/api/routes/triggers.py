"""Trigger ingress - the one entry point for user actions."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from agentboard.api.dependencies import DispatcherDep
from agentboard.api.models import APIResponse, TriggerCreate, TriggerResponse, dispatch_to_response
from agentboard.triggers import TriggerEvent, new_event_id

router = APIRouter(prefix="/triggers", tags=["triggers"])


@router.post(
    "",
    response_model=APIResponse[TriggerResponse],
    status_code=status.HTTP_202_ACCEPTED,
    responses={status.HTTP_409_CONFLICT: {"model": APIResponse[TriggerResponse]}},
)
async def create_trigger(
    body: TriggerCreate, dispatcher: DispatcherDep
) -> APIResponse[TriggerResponse] | JSONResponse:
    """Dispatch a user action.

    Returns 202 with the run ID (for implementation and QA agents) when the
    trigger is accepted, 409 when it duplicates an already accepted one.
    """
    trigger = TriggerEvent(
        event_id=body.event_id or new_event_id(),
        agent_kind=body.agent_kind,
        content=body.content,
    )
    result = await dispatcher.dispatch(trigger)
    response = dispatch_to_response(result)
    if not result.accepted:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=APIResponse[TriggerResponse](
                data=response, error=f"Duplicate trigger: {result.reason}"
            ).model_dump(mode="json"),
        )
    return APIResponse(data=response)
