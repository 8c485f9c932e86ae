"""
Tests for the client session store.
"""

from unittest.mock import MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from shared.infrastructure.session_store import (
    ClientSession,
    ClientSessionStore,
    InMemoryKeyValueStore,
    RedisKeyValueStore,
)
from shared.utils.exceptions import InternalError, ValidationError
from shared.utils.schemas import CartLine


def test_missing_session_loads_empty():
    store = ClientSessionStore(InMemoryKeyValueStore())
    session = store.load("fresh-session-1")
    assert session.items == []
    assert session.table_number is None


def test_save_then_load():
    store = ClientSessionStore(InMemoryKeyValueStore())
    session = ClientSession(session_id="abc-12345", table_number=4)
    session.items.append(CartLine(menu_item_id=1, name="Tea", unit_price="3.50", quantity=2))
    store.save(session)

    loaded = store.load("abc-12345")
    assert loaded.table_number == 4
    assert loaded.items[0].name == "Tea"
    assert loaded.items[0].quantity == 2


def test_clear_removes_session():
    store = ClientSessionStore(InMemoryKeyValueStore())
    store.save(ClientSession(session_id="abc-12345", table_number=4))
    store.clear("abc-12345")
    assert store.load("abc-12345").table_number is None


def test_expired_entries_disappear():
    kv = InMemoryKeyValueStore()
    kv.set("k", "v", ttl_seconds=0)
    assert kv.get("k") is None


def test_unreadable_payload_is_discarded():
    kv = InMemoryKeyValueStore()
    store = ClientSessionStore(kv)
    kv.set("session:client:abc-12345", "{not json", 60)
    assert store.load("abc-12345").items == []


@pytest.mark.parametrize("session_id", [None, "", "short", "has spaces in it", "x" * 129])
def test_invalid_session_ids_rejected(session_id):
    with pytest.raises(ValidationError):
        ClientSessionStore.validate_session_id(session_id)


def test_redis_outage_maps_to_internal_error():
    client = MagicMock()
    client.get.side_effect = RedisConnectionError("down")
    store = ClientSessionStore(RedisKeyValueStore(client))
    with pytest.raises(InternalError):
        store.load("abc-12345")


def test_redis_store_sets_ttl():
    client = MagicMock()
    store = ClientSessionStore(RedisKeyValueStore(client), ttl_seconds=120)
    store.save(ClientSession(session_id="abc-12345"))
    key, payload = client.set.call_args.args
    assert key == "session:client:abc-12345"
    assert client.set.call_args.kwargs["ex"] == 120
