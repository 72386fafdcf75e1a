from conftest import order_payload


class TestMenuReads:
    def test_public_menu_hides_unavailable(self, client, menu_items):
        names = [item["name"] for item in client.get("/api/menu").json()]
        assert names == ["Chapman", "Jollof Rice"]

    def test_full_menu(self, client, menu_items):
        items = client.get("/api/menu/all").json()
        assert len(items) == 3
        sold_out = next(item for item in items if item["id"] == menu_items["sold_out"])
        assert sold_out["available"] is False
        assert sold_out["price"] == "1800.00"

    def test_filter_by_category(self, client, menu_items):
        items = client.get("/api/menu", params={"category": "Drinks"}).json()
        assert [item["id"] for item in items] == [menu_items["B"]]

    def test_categories(self, client, menu_items):
        assert client.get("/api/menu/categories").json() == ["Drinks", "Main Course"]

    def test_unknown_item(self, client):
        response = client.get("/api/menu/404")
        assert response.status_code == 404
        assert response.json() == {"detail": "Menu item 404 not found", "error": "MenuItemNotFound"}


class TestMenuWrites:
    def test_create(self, client):
        response = client.post("/api/menu", json={
            "name": "Fried Plantain",
            "category": "Side",
            "price": "600.5",
            "imageUrl": "https://example.com/dodo.jpg",
        })
        assert response.status_code == 201

        item = response.json()
        assert item["price"] == "600.50"
        assert item["available"] is True
        assert item["imageUrl"] == "https://example.com/dodo.jpg"

    def test_create_rejects_negative_price(self, client):
        response = client.post("/api/menu", json={"name": "Free lunch", "category": "Side", "price": "-1"})
        assert response.status_code == 422

    def test_partial_update(self, client, menu_items):
        response = client.patch(f"/api/menu/{menu_items['A']}", json={"price": "2750.00"})
        assert response.status_code == 200
        assert response.json()["price"] == "2750.00"
        assert response.json()["name"] == "Jollof Rice"

    def test_availability_toggle_and_set(self, client, menu_items):
        url = f"/api/menu/{menu_items['A']}/availability"

        assert client.patch(url).json()["available"] is False
        assert client.patch(url).json()["available"] is True
        assert client.patch(url, json={"available": True}).json()["available"] is True

    def test_delete_unused_item(self, client, menu_items):
        assert client.delete(f"/api/menu/{menu_items['sold_out']}").status_code == 200
        assert client.get(f"/api/menu/{menu_items['sold_out']}").status_code == 404

    def test_delete_item_used_by_an_order(self, client, menu_items):
        client.post("/api/orders", json=order_payload(menu_items))

        response = client.delete(f"/api/menu/{menu_items['A']}")
        assert response.status_code == 409
        assert response.json()["error"] == "Conflict"
        assert client.get(f"/api/menu/{menu_items['A']}").status_code == 200
