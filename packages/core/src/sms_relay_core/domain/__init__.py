"""Domain layer — message record and event payloads."""

from .events import EVENT_TYPE_MESSAGE_API_SENT, MessageAPISentPayload
from .message import Message, MessageStatus, MessageType

__all__ = [
    "EVENT_TYPE_MESSAGE_API_SENT",
    "Message",
    "MessageAPISentPayload",
    "MessageStatus",
    "MessageType",
]
