"""
Tests for order lifecycle rules: transitions, kitchen queue ordering and
version staleness.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import pytest
from hypothesis import given, settings, strategies as st

from shared.config.constants import (
    ORDER_TRANSITIONS,
    OrderStatus,
    Roles,
    is_terminal_status,
    next_order_status,
    validate_order_transition,
)
from rest_api.services.domain.order_lifecycle import (
    build_kitchen_queue,
    get_allowed_order_transitions,
    is_stale,
    is_valid_status_history,
    required_permission,
    sort_by_priority,
)
from shared.security.permissions import Permission


BASE_TIME = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


@dataclass
class FakeOrder:
    id: int
    status: str
    priority: int
    created_at: datetime


class TestTransitions:
    """Transition table."""

    def test_pipeline_advances_one_step(self):
        assert next_order_status(OrderStatus.RECEIVED) == OrderStatus.PREPARING
        assert next_order_status(OrderStatus.PREPARING) == OrderStatus.QUALITY_CHECK
        assert next_order_status(OrderStatus.QUALITY_CHECK) == OrderStatus.READY
        assert next_order_status(OrderStatus.READY) == OrderStatus.DELIVERED

    def test_terminal_states_have_no_next(self):
        assert next_order_status(OrderStatus.DELIVERED) is None
        assert next_order_status(OrderStatus.CANCELLED) is None
        assert is_terminal_status(OrderStatus.DELIVERED)
        assert is_terminal_status(OrderStatus.CANCELLED)

    @pytest.mark.parametrize("status", OrderStatus.ACTIVE)
    def test_cancel_allowed_from_every_active_state(self, status):
        assert validate_order_transition(status, OrderStatus.CANCELLED)

    def test_skipping_a_step_is_rejected(self):
        assert not validate_order_transition(OrderStatus.RECEIVED, OrderStatus.READY)
        assert not validate_order_transition(OrderStatus.PREPARING, OrderStatus.DELIVERED)

    def test_moving_backwards_is_rejected(self):
        assert not validate_order_transition(OrderStatus.READY, OrderStatus.PREPARING)

    def test_required_permission(self):
        assert required_permission(OrderStatus.CANCELLED) == Permission.CANCEL_ORDER
        assert required_permission(OrderStatus.READY) == Permission.ADVANCE_ORDER_STATUS

    def test_customer_may_request_no_transition(self):
        assert get_allowed_order_transitions(OrderStatus.RECEIVED, Roles.CUSTOMER) == []

    def test_kitchen_may_advance_and_cancel(self):
        assert get_allowed_order_transitions(OrderStatus.RECEIVED, Roles.KITCHEN_STAFF) == [
            OrderStatus.PREPARING,
            OrderStatus.CANCELLED,
        ]

    def test_status_history(self):
        assert is_valid_status_history([])
        assert is_valid_status_history(OrderStatus.PIPELINE)
        assert is_valid_status_history(["received", "preparing", "cancelled"])
        assert not is_valid_status_history(["preparing", "quality_check"])
        assert not is_valid_status_history(["received", "ready"])
        assert not is_valid_status_history(["received", "cancelled", "preparing"])


class TestStatusProperties:
    """Property-based checks over random walks of the transition table."""

    @given(choices=st.lists(st.integers(min_value=0, max_value=5), max_size=10))
    @settings(max_examples=100)
    def test_random_walk_is_valid_history(self, choices):
        history = [OrderStatus.RECEIVED]
        for choice in choices:
            targets = ORDER_TRANSITIONS[history[-1]]
            if not targets:
                break
            history.append(targets[choice % len(targets)])
        assert is_valid_status_history(history)
        # Terminal states are absorbing
        for status in history[:-1]:
            assert not is_terminal_status(status)

    @given(status=st.sampled_from(OrderStatus.ALL), target=st.sampled_from(OrderStatus.ALL))
    def test_at_most_one_forward_step(self, status, target):
        if validate_order_transition(status, target) and target != OrderStatus.CANCELLED:
            assert OrderStatus.PIPELINE.index(target) == OrderStatus.PIPELINE.index(status) + 1


class TestKitchenQueue:
    """Queue grouping and ordering."""

    def test_priority_sort_is_stable(self):
        orders = [
            FakeOrder(1, "received", 1, BASE_TIME),
            FakeOrder(2, "received", 3, BASE_TIME),
            FakeOrder(3, "received", 1, BASE_TIME),
            FakeOrder(4, "received", 3, BASE_TIME),
        ]
        assert [o.id for o in sort_by_priority(orders)] == [2, 4, 1, 3]

    def test_groups_in_pipeline_order_and_drops_terminal(self):
        orders = [
            FakeOrder(1, "ready", 1, BASE_TIME),
            FakeOrder(2, "delivered", 3, BASE_TIME),
            FakeOrder(3, "received", 1, BASE_TIME),
            FakeOrder(4, "cancelled", 1, BASE_TIME),
        ]
        queue = build_kitchen_queue(orders)
        assert list(queue) == OrderStatus.ACTIVE
        assert [o.id for o in queue["ready"]] == [1]
        assert [o.id for o in queue["received"]] == [3]
        assert sum(len(group) for group in queue.values()) == 2

    def test_equal_priority_oldest_first(self):
        orders = [
            FakeOrder(10, "preparing", 2, BASE_TIME + timedelta(minutes=5)),
            FakeOrder(11, "preparing", 2, BASE_TIME),
            FakeOrder(12, "preparing", 3, BASE_TIME + timedelta(minutes=9)),
        ]
        queue = build_kitchen_queue(orders)
        assert [o.id for o in queue["preparing"]] == [12, 11, 10]

    def test_same_timestamp_breaks_tie_by_id(self):
        orders = [FakeOrder(8, "received", 1, BASE_TIME), FakeOrder(7, "received", 1, BASE_TIME)]
        assert [o.id for o in build_kitchen_queue(orders)["received"]] == [7, 8]

    @given(
        entries=st.lists(
            st.tuples(
                st.sampled_from(OrderStatus.ALL),
                st.sampled_from([1, 2, 3]),
                st.integers(min_value=0, max_value=120),
            ),
            max_size=30,
        )
    )
    def test_queue_ordering_property(self, entries):
        orders = [
            FakeOrder(i, status, priority, BASE_TIME + timedelta(minutes=minute))
            for i, (status, priority, minute) in enumerate(entries, start=1)
        ]
        queue = build_kitchen_queue(orders)
        expected = sum(1 for o in orders if o.status in OrderStatus.ACTIVE)
        assert sum(len(group) for group in queue.values()) == expected
        for status, group in queue.items():
            keys = [(-o.priority, o.created_at, o.id) for o in group]
            assert keys == sorted(keys)
            assert all(o.status == status for o in group)


class TestStaleness:
    def test_older_payload_is_stale(self):
        assert is_stale(3, 2)

    def test_same_or_newer_is_not_stale(self):
        assert not is_stale(3, 3)
        assert not is_stale(3, 4)

    def test_nothing_held_is_never_stale(self):
        assert not is_stale(None, 1)
