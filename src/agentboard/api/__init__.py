"""REST API for agentboard."""

from agentboard.api.app import create_app
from agentboard.api.models import APIResponse, TriggerCreate, TriggerResponse

__all__ = [
    "APIResponse",
    "TriggerCreate",
    "TriggerResponse",
    "create_app",
]
