from .message_service import (
    MessageSendParams,
    MessageService,
    MessageStatusParams,
    MessageStoreParams,
)

__all__ = [
    "MessageSendParams",
    "MessageService",
    "MessageStatusParams",
    "MessageStoreParams",
]
