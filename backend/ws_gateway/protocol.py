"""
Client message protocol for the gateway.

    {"type": "join-table", "tableNumber": 4}
    {"type": "join-kitchen"}
    {"type": "join-admin"}
    {"type": "leave", "room": "table:4"}
    {"type": "ping"}
"""

from __future__ import annotations

import json
from typing import Any

from shared.config.constants import RoomMessage
from shared.infrastructure.events import ROOM_ADMIN, ROOM_KITCHEN, is_valid_room, room_table
from shared.security.permissions import Permission, has_capability


class ProtocolError(ValueError):
    """Malformed or unknown client message."""


class JoinDenied(PermissionError):
    """The connection's role cannot join the requested room."""


STAFF_ROOM_PERMISSIONS: dict[str, Permission] = {
    ROOM_KITCHEN: Permission.JOIN_KITCHEN_ROOM,
    ROOM_ADMIN: Permission.JOIN_ADMIN_ROOM,
}

JOIN_MESSAGES = {
    RoomMessage.JOIN_KITCHEN: ROOM_KITCHEN,
    RoomMessage.JOIN_ADMIN: ROOM_ADMIN,
}


def parse_client_message(raw: str) -> dict[str, Any]:
    if raw == "ping":
        return {"type": RoomMessage.PING}
    try:
        message = json.loads(raw)
    except json.JSONDecodeError:
        raise ProtocolError("Message is not valid JSON")
    if not isinstance(message, dict) or not isinstance(message.get("type"), str):
        raise ProtocolError("Message must be an object with a string 'type'")
    return message


def room_for_join(message: dict[str, Any], role: str | None) -> str:
    """
    Resolve a join message to a room name, checking the caller's role.

    Anonymous callers (``role`` None) may only join table rooms.
    """
    msg_type = message["type"]
    if msg_type == RoomMessage.JOIN_TABLE:
        try:
            return room_table(message.get("tableNumber"))
        except ValueError as e:
            raise ProtocolError(str(e))

    room = JOIN_MESSAGES.get(msg_type)
    if room is None:
        raise ProtocolError(f"Unknown message type: {msg_type}")
    if not has_capability(role, STAFF_ROOM_PERMISSIONS[room]):
        raise JoinDenied(f"Not allowed to join {room}")
    return room


def room_for_leave(message: dict[str, Any]) -> str:
    room = message.get("room")
    if not isinstance(room, str) or not is_valid_room(room):
        raise ProtocolError(f"Unknown room: {room!r}")
    return room
