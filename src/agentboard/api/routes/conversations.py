"""Conversation log endpoints."""

from fastapi import APIRouter, Query

from agentboard.api.dependencies import RouterDep
from agentboard.api.models import APIResponse, MessageResponse, message_to_response
from agentboard.triggers import AgentKind

router = APIRouter(prefix="/conversations", tags=["conversations"])


@router.get("/{agent_kind}", response_model=APIResponse[list[MessageResponse]])
def get_conversation(
    agent_kind: AgentKind,
    conversation_router: RouterDep,
    run_id: str | None = Query(default=None, description="Only messages of this run"),
) -> APIResponse[list[MessageResponse]]:
    """Get the messages of one agent's conversation, oldest first."""
    log = conversation_router.log(agent_kind)
    messages = log.for_run(run_id) if run_id else log.messages
    return APIResponse(data=[message_to_response(m) for m in messages])
