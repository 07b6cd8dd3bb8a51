import uuid
from typing import Protocol


class IIDGenerator(Protocol):
    """
    Protocol for identity generation strategies.
    Used for both message ids and event ids so tests can make them
    deterministic.
    """

    def next_id(self) -> str:
        """Generates the next unique identifier."""
        ...


class UUID4Generator(IIDGenerator):
    """
    Default ID generator using UUIDv4.
    Zero external dependencies.
    """

    def next_id(self) -> str:
        """Returns a string representation of a random UUIDv4."""
        return str(uuid.uuid4())
