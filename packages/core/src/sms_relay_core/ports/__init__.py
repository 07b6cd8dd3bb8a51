from .message_store import IMessageStore
from .messaging import IEventPublisher, IMessageConsumer

__all__ = [
    "IEventPublisher",
    "IMessageConsumer",
    "IMessageStore",
]
