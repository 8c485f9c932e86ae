"""
Tests for menu browsing and management.
"""

NEW_ITEM = {
    "name": "Berry Smoothie",
    "description": "Mixed berries and yogurt",
    "price": 5.25,
    "category": "Drinks",
    "ingredients": ["berries", "yogurt"],
    "allergens": ["Dairy"],
    "preparationTime": 4,
    "nutritionPerServing": {"calories": 210, "protein": 6, "carbs": 38, "fat": 3, "sodium": 40, "fiber": 4},
}


class TestBrowse:
    def test_list_menu(self, client, menu_items):
        response = client.get("/api/menu")
        assert response.status_code == 200
        names = [item["name"] for item in response.json()["items"]]
        assert set(names) == {"Protein Burger", "Green Salad", "Seared Salmon", "Soup of the Day"}

    def test_filter_available(self, client, menu_items):
        items = client.get("/api/menu?available=true").json()["items"]
        assert "Soup of the Day" not in [item["name"] for item in items]
        assert all(item["isAvailable"] for item in items)

    def test_filter_category(self, client, menu_items):
        items = client.get("/api/menu", params={"category": "Main Course"}).json()["items"]
        assert {item["name"] for item in items} == {"Protein Burger", "Seared Salmon"}

    def test_unknown_category_rejected(self, client, menu_items):
        assert client.get("/api/menu?category=Snacks").status_code == 422

    def test_categories_in_menu_order(self, client, menu_items):
        assert client.get("/api/menu/categories").json()["categories"] == ["Appetizers", "Main Course"]

    def test_item_detail(self, client, menu_items):
        item = client.get(f"/api/menu/{menu_items['burger'].id}").json()["item"]
        assert item["price"] == 10.0
        assert item["allergens"] == ["Gluten", "Dairy"]
        assert item["nutritionPerServing"]["protein"] == 40

    def test_large_portion_scales_nutrition(self, client, menu_items):
        item = client.get(f"/api/menu/{menu_items['burger'].id}?portion=Large").json()["item"]
        assert item["nutritionPerServing"]["protein"] == 60
        assert item["nutritionPerServing"]["calories"] == 1050
        # Price on the item is always the standard price
        assert item["price"] == 10.0

    def test_unknown_portion_rejected(self, client, menu_items):
        assert client.get(f"/api/menu/{menu_items['burger'].id}?portion=Huge").status_code == 422

    def test_missing_item(self, client):
        assert client.get("/api/menu/9999").status_code == 404


class TestManage:
    def test_manager_creates_item(self, client, manager_headers):
        response = client.post("/api/menu", json=NEW_ITEM, headers=manager_headers)
        assert response.status_code == 201
        item = response.json()["item"]
        assert item["price"] == 5.25
        assert item["isAvailable"] is True
        assert item["serves"] == 1
        assert client.get(f"/api/menu/{item['id']}").status_code == 200

    def test_kitchen_cannot_manage_menu(self, client, kitchen_headers):
        assert client.post("/api/menu", json=NEW_ITEM, headers=kitchen_headers).status_code == 403

    def test_anonymous_cannot_manage_menu(self, client):
        assert client.post("/api/menu", json=NEW_ITEM).status_code == 401

    def test_invalid_price_rejected(self, client, manager_headers):
        body = {**NEW_ITEM, "price": 0}
        assert client.post("/api/menu", json=body, headers=manager_headers).status_code == 422

    def test_partial_update(self, client, menu_items, manager_headers):
        response = client.put(
            f"/api/menu/{menu_items['salad'].id}",
            json={"price": 8.0, "description": "Now with feta"},
            headers=manager_headers,
        )
        item = response.json()["item"]
        assert item["price"] == 8.0
        assert item["description"] == "Now with feta"
        assert item["name"] == "Green Salad"

    def test_toggle_availability(self, client, menu_items, admin_headers):
        response = client.patch(
            f"/api/menu/{menu_items['soup'].id}/availability",
            json={"isAvailable": True},
            headers=admin_headers,
        )
        assert response.json()["item"]["isAvailable"] is True

    def test_delete_hides_item(self, client, menu_items, manager_headers):
        item_id = menu_items["salad"].id
        assert client.delete(f"/api/menu/{item_id}", headers=manager_headers).status_code == 204
        assert client.get(f"/api/menu/{item_id}").status_code == 404
        assert item_id not in [item["id"] for item in client.get("/api/menu").json()["items"]]
        assert client.delete(f"/api/menu/{item_id}", headers=manager_headers).status_code == 404

    def test_deleted_item_cannot_be_ordered(self, client, menu_items, manager_headers):
        item_id = menu_items["salad"].id
        client.delete(f"/api/menu/{item_id}", headers=manager_headers)
        body = {"tableNumber": 1, "items": [{"menuItemId": item_id}]}
        assert client.post("/api/orders", json=body).status_code == 404

    def test_past_orders_keep_lines_after_delete(self, client, menu_items, manager_headers, make_order):
        order = make_order()
        client.delete(f"/api/menu/{menu_items['salad'].id}", headers=manager_headers)
        lines = client.get(f"/api/orders/{order.id}").json()["order"]["items"]
        assert lines[0]["name"] == "Green Salad"
