"""
Event envelope shared by the publisher and the gateway subscriber.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any

from shared.config.constants import EventType

from .channels import is_valid_room


@dataclass
class Event:
    """
    One event addressed to one room.

    ``data`` is the payload delivered to WebSocket clients unchanged; order
    payloads carry ``version`` so clients can discard stale updates.
    """

    type: str
    room: str
    data: dict[str, Any] = field(default_factory=dict)
    ts: str | None = None
    v: int = 1

    def __post_init__(self) -> None:
        if self.type not in EventType.ALL:
            raise ValueError(f"Unknown event type: {self.type!r}")
        if not isinstance(self.room, str) or not is_valid_room(self.room):
            raise ValueError(f"Invalid room: {self.room!r}")
        if not isinstance(self.data, dict):
            raise ValueError("Event data must be a dict")
        if self.ts is None:
            self.ts = datetime.now(timezone.utc).isoformat()

    def to_json(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False, default=str)

    @classmethod
    def from_json(cls, raw: str | bytes) -> "Event":
        """Parse and validate. Raises ValueError on malformed input."""
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ValueError(f"Event is not valid JSON: {e}") from e
        if not isinstance(payload, dict):
            raise ValueError("Event must be a JSON object")
        try:
            return cls(
                type=payload["type"],
                room=payload["room"],
                data=payload.get("data") or {},
                ts=payload.get("ts"),
                v=payload.get("v", 1),
            )
        except KeyError as e:
            raise ValueError(f"Event missing field: {e.args[0]}") from e

    def to_client_message(self) -> dict[str, Any]:
        """Shape sent over the WebSocket."""
        return {"type": self.type, "data": self.data, "ts": self.ts}
