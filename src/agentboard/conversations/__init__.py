"""Conversations - per-agent logs and the router that feeds them."""

from agentboard.conversations.events import Event, EventManager, EventType, Subscriber
from agentboard.conversations.log import ConversationLog
from agentboard.conversations.models import Message, MessageLabel
from agentboard.conversations.router import ConversationRouter, RunBindingError

__all__ = [
    "ConversationLog",
    "ConversationRouter",
    "Event",
    "EventManager",
    "EventType",
    "Message",
    "MessageLabel",
    "RunBindingError",
    "Subscriber",
]
