"""JSON envelopes exchanged with the lobby hub: ``{"event": ..., "data": {...}}``."""
from __future__ import annotations

import json
from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID


class _Encoder(json.JSONEncoder):
    def default(self, o: object) -> Any:
        if isinstance(o, (UUID, Decimal)):
            return str(o)
        if isinstance(o, datetime):
            return o.isoformat()
        return super().default(o)


def serialize_event(event_type: str, payload: dict[str, Any]) -> str:
    return json.dumps({"event": event_type, "data": payload}, cls=_Encoder)


def deserialize_event(raw: str | bytes) -> tuple[str, dict[str, Any]]:
    """Split a hub envelope into its event name and payload.

    A missing or null payload becomes an empty dict. Raises ValueError when
    the message is not a lobby envelope.
    """
    envelope = json.loads(raw)
    if not isinstance(envelope, dict):
        raise ValueError("Hub message is not a JSON object")

    event_type = envelope.get("event")
    if not isinstance(event_type, str) or not event_type:
        raise ValueError("Hub message has no event name")

    data = envelope.get("data") or {}
    if not isinstance(data, dict):
        raise ValueError(f"Payload of {event_type} is not an object")
    return event_type, data
