"""
Rooms and their Redis channels.

A room is the pub/sub scope a WebSocket client joins: ``table:{n}``,
``kitchen`` or ``admin``. Each room maps to one Redis channel.
"""

from __future__ import annotations

from shared.config.constants import Limits

CHANNEL_PREFIX = "vibedine:room:"
CHANNEL_PATTERN = CHANNEL_PREFIX + "*"

ROOM_KITCHEN = "kitchen"
ROOM_ADMIN = "admin"
STAFF_ROOMS = (ROOM_KITCHEN, ROOM_ADMIN)


def _validate_table_number(table_number: int) -> None:
    if (
        not isinstance(table_number, int)
        or isinstance(table_number, bool)
        or not Limits.MIN_TABLE_NUMBER <= table_number <= Limits.MAX_TABLE_NUMBER
    ):
        raise ValueError(
            f"table_number must be an integer between {Limits.MIN_TABLE_NUMBER} "
            f"and {Limits.MAX_TABLE_NUMBER}, got {table_number!r}"
        )


def room_table(table_number: int) -> str:
    _validate_table_number(table_number)
    return f"table:{table_number}"


def is_valid_room(room: str) -> bool:
    if room in STAFF_ROOMS:
        return True
    prefix, _, number = room.partition(":")
    if prefix != "table" or not number.isdigit():
        return False
    return Limits.MIN_TABLE_NUMBER <= int(number) <= Limits.MAX_TABLE_NUMBER


def channel_for_room(room: str) -> str:
    if not is_valid_room(room):
        raise ValueError(f"Unknown room: {room!r}")
    return CHANNEL_PREFIX + room


def room_from_channel(channel: str) -> str | None:
    """Inverse of channel_for_room; None for channels outside the prefix."""
    if not channel.startswith(CHANNEL_PREFIX):
        return None
    room = channel[len(CHANNEL_PREFIX):]
    return room if is_valid_room(room) else None
