"""Event payloads published by the message pipeline."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

EVENT_TYPE_MESSAGE_API_SENT = "message.api.sent"


class MessageAPISentPayload(BaseModel):
    """Send intent for a message accepted through the API.

    Serialized with wire aliases (``from``, ``requestReceivedAt``); both the
    alias and the python name are accepted when validating.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    from_: str = Field(alias="from")
    to: str
    request_received_at: datetime = Field(alias="requestReceivedAt")
    content: str
