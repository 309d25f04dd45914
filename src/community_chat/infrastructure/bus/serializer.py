"""JSON envelope shared by the Pub/Sub relay and the WS payload builders."""
from __future__ import annotations

import dataclasses
import json
from datetime import datetime
from typing import Any
from uuid import UUID


class _Encoder(json.JSONEncoder):
    def default(self, o: object) -> Any:
        if isinstance(o, UUID):
            return str(o)
        if isinstance(o, datetime):
            return o.isoformat()
        if dataclasses.is_dataclass(o) and not isinstance(o, type):
            return dataclasses.asdict(o)
        if isinstance(o, (set, frozenset)):
            return list(o)
        return super().default(o)


def to_jsonable(payload: dict[str, Any]) -> dict[str, Any]:
    """Plain-JSON copy of a payload holding UUIDs, datetimes or entities."""
    return json.loads(json.dumps(payload, cls=_Encoder))


def serialize_event(event_type: str, payload: dict[str, Any]) -> str:
    envelope = {"event": event_type, "data": payload}
    return json.dumps(envelope, cls=_Encoder)


def deserialize_event(raw: str | bytes) -> tuple[str, dict[str, Any]]:
    data = json.loads(raw)
    return data["event"], data["data"]
