"""In-memory adapters for tests and local wiring."""

from .message_store import InMemoryMessageStore

__all__ = ["InMemoryMessageStore"]
