"""
tests/test_foods.py – /api/foods over HTTP.
Scenarios: create/read round trip, filters, images, guarded delete.
"""
import io
import re


def _form(category_id, **kw):
    data = {"food_name": "Nasi Goreng", "category_id": str(category_id), "price": "9.99", "stock": "10"}
    data.update(kw)
    return data


def _sell(client, food_id, qty=1):
    r = client.post("/api/transactions", json={
        "items": [{"food_id": food_id, "quantity": qty, "unit_price": 8.99}],
        "payment_method": "debit",
    })
    assert r.status_code == 201, r.text
    return r.json()["data"]


# ── Create / read ──────────────────────────────────────────────────────────────

class TestCreate:
    def test_round_trip(self, client, category_id):
        r = client.post("/api/foods", data=_form(category_id))
        assert r.status_code == 201, r.text
        created = r.json()["data"]
        assert re.fullmatch(r"MKN\d{4}", created["food_code"])
        assert created["status"] == "available"

        got = client.get(f"/api/foods/{created['id']}").json()["data"]
        assert got["price"] == 9.99
        assert got["stock"] == 10
        assert got["category_name"] == "Main Course"
        assert got["image_url"] is None

    def test_unknown_category(self, client):
        r = client.post("/api/foods", data=_form(999))
        assert r.status_code == 400
        assert r.json()["message"] == "Category not found"

    def test_negative_price_rejected(self, client, category_id):
        r = client.post("/api/foods", data=_form(category_id, price="-1"))
        assert r.status_code == 400
        assert r.json()["success"] is False

    def test_missing_name_rejected(self, client, category_id):
        r = client.post("/api/foods", data={"category_id": str(category_id), "price": "1"})
        assert r.status_code == 400

    def test_missing_food(self, client):
        r = client.get("/api/foods/404")
        assert r.status_code == 404
        assert r.json() == {"success": False, "message": "Food not found"}


class TestList:
    def test_filters(self, client, make_food):
        make_food("Fried Rice")
        make_food("Fried Chicken")
        make_food("Iced Tea")
        names = [f["food_name"] for f in client.get("/api/foods", params={"search": "fried"}).json()["data"]]
        assert names == ["Fried Chicken", "Fried Rice"]
        assert client.get("/api/foods", params={"status": "inactive"}).json()["data"] == []
        assert len(client.get("/api/foods").json()["data"]) == 3

    def test_search_wildcards_are_literal(self, client, make_food):
        make_food("Fried Rice")
        make_food("100% Juice")
        names = [f["food_name"] for f in client.get("/api/foods", params={"search": "%"}).json()["data"]]
        assert names == ["100% Juice"]
        assert client.get("/api/foods", params={"search": "_"}).json()["data"] == []


class TestUpdate:
    def test_update_fields(self, client, make_food, category_id):
        food = make_food()
        r = client.put(f"/api/foods/{food.id}", data=_form(category_id, food_name="Fried Rice XL",
                                                             price="11.50", stock="7", status="inactive"))
        assert r.status_code == 200, r.text
        data = r.json()["data"]
        assert data["food_name"] == "Fried Rice XL"
        assert data["price"] == 11.5
        assert data["stock"] == 7
        assert data["status"] == "inactive"
        assert data["food_code"] == food.food_code


# ── Images ─────────────────────────────────────────────────────────────────────

class TestImages:
    def test_upload_and_replace(self, client, category_id, services):
        r = client.post("/api/foods", data=_form(category_id),
                        files={"image": ("dish.png", io.BytesIO(b"\x89PNG fake"), "image/png")})
        assert r.status_code == 201, r.text
        first = r.json()["data"]
        assert first["image"].endswith(".png")
        assert first["image_url"] == f"/uploads/{first['image']}"
        assert (services.storage.directory / first["image"]).exists()

        r = client.put(f"/api/foods/{first['id']}", data=_form(category_id),
                       files={"image": ("dish2.jpg", io.BytesIO(b"jpeg"), "image/jpeg")})
        second = r.json()["data"]
        assert second["image"] != first["image"]
        assert not (services.storage.directory / first["image"]).exists()
        assert (services.storage.directory / second["image"]).exists()

    def test_rejects_non_image(self, client, category_id, services):
        r = client.post("/api/foods", data=_form(category_id),
                        files={"image": ("notes.txt", io.BytesIO(b"hello"), "text/plain")})
        assert r.status_code == 400
        assert client.get("/api/foods").json()["data"] == []

    def test_failed_create_removes_file(self, client, services):
        r = client.post("/api/foods", data=_form(999),
                        files={"image": ("dish.png", io.BytesIO(b"png"), "image/png")})
        assert r.status_code == 400
        assert list(services.storage.directory.iterdir()) == []

    def test_delete_removes_file(self, client, category_id, services):
        created = client.post("/api/foods", data=_form(category_id),
                              files={"image": ("dish.png", io.BytesIO(b"png"), "image/png")}).json()["data"]
        assert client.delete(f"/api/foods/{created['id']}").status_code == 200
        assert not (services.storage.directory / created["image"]).exists()


# ── Delete ─────────────────────────────────────────────────────────────────────

class TestDelete:
    def test_unreferenced(self, client, make_food):
        food = make_food()
        r = client.delete(f"/api/foods/{food.id}")
        assert r.status_code == 200
        assert r.json()["message"] == "Food deleted successfully"
        assert client.get(f"/api/foods/{food.id}").status_code == 404

    def test_referenced_needs_confirmation(self, client, make_food):
        food = make_food()
        for _ in range(3):
            _sell(client, food.id)
        r = client.delete(f"/api/foods/{food.id}")
        assert r.status_code == 409
        body = r.json()
        assert body["success"] is False
        assert body["requiresConfirmation"] is True
        assert body["transaction_count"] == 3
        assert body["first_transaction_date"].startswith("2026-10-16")
        assert body["last_transaction_date"].startswith("2026-10-16")
        assert client.get(f"/api/foods/{food.id}").status_code == 200

    def test_force_keeps_transaction_headers(self, client, make_food):
        food = make_food()
        other = make_food("Iced Tea")
        sale = _sell(client, food.id)
        _sell(client, other.id)

        r = client.delete(f"/api/foods/{food.id}", params={"force": "true"})
        assert r.status_code == 200, r.text
        assert client.get(f"/api/foods/{food.id}").status_code == 404

        header = client.get(f"/api/transactions/{sale['id']}").json()["data"]
        assert header["transaction_code"] == sale["transaction_code"]
        assert header["items"] == []
        assert client.get("/api/transactions").json()["pagination"]["total"] == 2
