"""
Tests for diner feedback and its statistics.
"""

import pytest

from rest_api.services.domain import OrderService


@pytest.fixture
def deliver(db_session, kitchen_user):
    """Walk an order through the pipeline to delivered."""
    actor = {"user_id": kitchen_user.id, "role": kitchen_user.role}

    def _deliver(order):
        service = OrderService(db_session)
        for _ in range(4):
            order = service.advance(order.id, actor)
        return order

    return _deliver


def rating(order_id, food=5, service=4, overall=5, recommend=True, **extra):
    return {
        "orderId": order_id,
        "foodRating": food,
        "serviceRating": service,
        "overallRating": overall,
        "wouldRecommend": recommend,
        **extra,
    }


class TestSubmit:
    def test_guest_feedback_on_delivered_order(self, client, make_order, deliver):
        order = deliver(make_order(table_number=8))
        response = client.post("/api/feedback", json=rating(order.id, comment="Lovely"))
        assert response.status_code == 201
        feedback = response.json()["feedback"]
        assert feedback["tableNumber"] == 8
        assert feedback["comment"] == "Lovely"
        assert feedback["customer"] is None
        assert feedback["order"]["orderNumber"] == order.order_number

    def test_customer_feedback_is_attributed(self, client, make_order, deliver, customer_headers):
        order = deliver(make_order())
        feedback = client.post("/api/feedback", json=rating(order.id), headers=customer_headers).json()["feedback"]
        assert feedback["customer"] == {"name": "Casey Customer"}

    def test_staff_entry_not_attributed_to_staff(self, client, make_order, deliver, manager_headers):
        order = deliver(make_order())
        feedback = client.post("/api/feedback", json=rating(order.id), headers=manager_headers).json()["feedback"]
        assert feedback["customer"] is None

    def test_undelivered_order_is_conflict(self, client, make_order):
        order = make_order()
        assert client.post("/api/feedback", json=rating(order.id)).status_code == 409

    def test_duplicate_is_conflict(self, client, make_order, deliver):
        order = deliver(make_order())
        assert client.post("/api/feedback", json=rating(order.id)).status_code == 201
        assert client.post("/api/feedback", json=rating(order.id)).status_code == 409

    def test_unknown_order(self, client):
        assert client.post("/api/feedback", json=rating(777)).status_code == 404

    @pytest.mark.parametrize("field", ["food", "service", "overall"])
    @pytest.mark.parametrize("value", [0, 6])
    def test_ratings_bounded(self, client, make_order, deliver, field, value):
        order = deliver(make_order())
        assert client.post("/api/feedback", json=rating(order.id, **{field: value})).status_code == 422


class TestRead:
    def test_listing_needs_view_feedback(self, client, kitchen_headers, customer_headers):
        assert client.get("/api/feedback", headers=kitchen_headers).status_code == 403
        assert client.get("/api/feedback", headers=customer_headers).status_code == 403
        assert client.get("/api/feedback/stats").status_code == 401

    def test_list_newest_first(self, client, make_order, deliver, manager_headers):
        first = deliver(make_order(table_number=1))
        second = deliver(make_order(table_number=2))
        client.post("/api/feedback", json=rating(first.id))
        client.post("/api/feedback", json=rating(second.id))

        feedback = client.get("/api/feedback", headers=manager_headers).json()["feedback"]
        assert [f["orderId"] for f in feedback] == [second.id, first.id]

    def test_stats(self, client, make_order, deliver, manager_headers):
        first = deliver(make_order(table_number=1))
        second = deliver(make_order(table_number=2))
        client.post("/api/feedback", json=rating(first.id, food=5, service=4, overall=5, recommend=True))
        client.post("/api/feedback", json=rating(second.id, food=2, service=3, overall=3, recommend=False))

        stats = client.get("/api/feedback/stats", headers=manager_headers).json()
        assert stats == {
            "avgFoodRating": 3.5,
            "avgServiceRating": 3.5,
            "avgOverallRating": 4.0,
            "recommendationRate": 50.0,
            "totalFeedback": 2,
        }

    def test_empty_stats(self, client, admin_headers):
        stats = client.get("/api/feedback/stats", headers=admin_headers).json()
        assert stats["totalFeedback"] == 0
        assert stats["recommendationRate"] == 0.0
