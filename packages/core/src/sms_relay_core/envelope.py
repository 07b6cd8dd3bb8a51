"""EventEnvelope — immutable CloudEvents-style wrapper built per publish."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticSerializationError, to_json

from .domain.events import EVENT_TYPE_MESSAGE_API_SENT
from .primitives.exceptions import EventSerializationError

if TYPE_CHECKING:
    from .domain.events import MessageAPISentPayload
    from .primitives.clock import IClock
    from .primitives.id_generator import IIDGenerator

APPLICATION_JSON = "application/json"
CLOUDEVENTS_SPEC_VERSION = "1.0"

P = TypeVar("P", bound=BaseModel)


class EventEnvelope(BaseModel):
    """Versioned, self-describing event.

    ``data`` holds the already-serialized JSON payload; the bus owns
    retention, this object is never persisted by the pipeline.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    source: str
    type: str
    time: datetime
    datacontenttype: str = APPLICATION_JSON
    specversion: str = CLOUDEVENTS_SPEC_VERSION
    data: bytes = Field(default=b"{}", repr=False)

    def decode(self, model_cls: type[P]) -> P:
        """Validate ``data`` into *model_cls* (consumer side)."""
        try:
            return model_cls.model_validate_json(self.data)
        except PydanticValidationError as e:
            raise EventSerializationError(
                f"cannot decode {self.type} data as {model_cls.__name__}: {e}",
                event_id=self.id,
            ) from e


def encode_payload(payload: BaseModel | dict[str, Any]) -> bytes:
    """Serialize a payload to JSON bytes using wire aliases."""
    try:
        if isinstance(payload, BaseModel):
            return payload.model_dump_json(by_alias=True).encode("utf-8")
        return to_json(payload, by_alias=True)
    except (PydanticSerializationError, TypeError, ValueError) as e:
        raise EventSerializationError(
            f"cannot encode {type(payload).__name__} as JSON: {e}"
        ) from e


class EventEnvelopeBuilder:
    """Builds envelopes from domain payloads.

    Pure apart from the injected clock and id generator, so a fixed clock and
    a scripted generator make the output fully reproducible.
    """

    def __init__(self, clock: IClock, id_generator: IIDGenerator) -> None:
        self._clock = clock
        self._id_generator = id_generator

    def build(
        self,
        event_type: str,
        source: str,
        payload: BaseModel | dict[str, Any],
    ) -> EventEnvelope:
        data = encode_payload(payload)
        return EventEnvelope(
            id=self._id_generator.next_id(),
            source=source,
            type=event_type,
            time=self._clock.now(),
            data=data,
        )

    def message_api_sent(
        self, source: str, payload: MessageAPISentPayload
    ) -> EventEnvelope:
        return self.build(EVENT_TYPE_MESSAGE_API_SENT, source, payload)
