"""CloudEventSerializer — structured-mode CloudEvents JSON roundtrip."""

from __future__ import annotations

import json
import re
from datetime import datetime, timezone
from typing import Any

from pydantic import AwareDatetime, TypeAdapter
from pydantic_core import to_json

from sms_relay_core.envelope import APPLICATION_JSON, EventEnvelope
from sms_relay_core.primitives.exceptions import EventSerializationError

_REQUIRED_ATTRIBUTES = ("specversion", "id", "source", "type", "time")
_RFC3339 = re.compile(
    r"(?P<date>\d{4}-\d{2}-\d{2})[Tt](?P<time>\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<fraction>\d+))?(?P<offset>[Zz]|[+-]\d{2}:\d{2})"
)
_AWARE_DATETIME = TypeAdapter(AwareDatetime)


def format_rfc3339(value: datetime) -> str:
    """UTC timestamp with a ``Z`` suffix, e.g. ``2022-06-05T14:26:02.302718Z``."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def parse_rfc3339(value: str) -> datetime:
    """Parse an RFC 3339 timestamp, which must carry an offset.

    Accepts lowercase ``t``/``z`` and any number of fractional digits;
    precision beyond microseconds is truncated.
    """
    match = _RFC3339.fullmatch(value)
    if match is None:
        raise ValueError(f"not an RFC 3339 timestamp: {value!r}")
    fraction = (match["fraction"] or "")[:6]
    normalized = f"{match['date']}T{match['time']}"
    if fraction:
        normalized += f".{fraction.ljust(6, '0')}"
    return _AWARE_DATETIME.validate_python(normalized + match["offset"].upper())


class CloudEventSerializer:
    """Serialize/deserialize ``EventEnvelope`` to/from JSON bytes.

    Wire shape::

        {"specversion": "1.0", "id": "...", "source": "...",
         "type": "message.api.sent", "time": "2022-06-05T14:26:02Z",
         "datacontenttype": "application/json",
         "data": {"id": "...", "from": "...", "to": "...",
                  "requestReceivedAt": "...", "content": "..."}}
    """

    def to_dict(self, envelope: EventEnvelope) -> dict[str, Any]:
        try:
            data = json.loads(envelope.data)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise EventSerializationError(
                f"envelope data is not JSON: {e}", event_id=envelope.id
            ) from e
        return {
            "specversion": envelope.specversion,
            "id": envelope.id,
            "source": envelope.source,
            "type": envelope.type,
            "time": format_rfc3339(envelope.time),
            "datacontenttype": envelope.datacontenttype,
            "data": data,
        }

    def serialize(self, envelope: EventEnvelope) -> bytes:
        """Encode envelope to JSON bytes."""
        try:
            return json.dumps(self.to_dict(envelope)).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise EventSerializationError(str(e), event_id=envelope.id) from e

    def deserialize(self, raw: bytes) -> EventEnvelope:
        """Decode JSON bytes to ``EventEnvelope``."""
        try:
            wire = json.loads(raw.decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise EventSerializationError(f"malformed cloud event: {e}") from e
        if not isinstance(wire, dict):
            raise EventSerializationError("cloud event must be a JSON object")
        return self.from_dict(wire)

    def from_dict(self, wire: dict[str, Any]) -> EventEnvelope:
        missing = [key for key in _REQUIRED_ATTRIBUTES if not wire.get(key)]
        if missing:
            raise EventSerializationError(
                f"cloud event is missing attributes {missing}", event_id=wire.get("id")
            )
        content_type = wire.get("datacontenttype", APPLICATION_JSON)
        if content_type != APPLICATION_JSON:
            raise EventSerializationError(
                f"unsupported datacontenttype [{content_type}]", event_id=wire["id"]
            )
        try:
            return EventEnvelope(
                id=wire["id"],
                source=wire["source"],
                type=wire["type"],
                time=parse_rfc3339(str(wire["time"])),
                datacontenttype=content_type,
                specversion=wire["specversion"],
                data=to_json(wire.get("data", {})),
            )
        except ValueError as e:
            raise EventSerializationError(str(e), event_id=wire["id"]) from e
