"""tests/test_categories.py – /api/categories CRUD and its guards."""


class TestCategories:
    def test_create_and_list(self, client):
        r = client.post("/api/categories", json={"category_name": "Desserts", "description": "Sweet"})
        assert r.status_code == 201, r.text
        assert r.json()["data"]["food_count"] == 0

        data = client.get("/api/categories").json()["data"]
        assert [c["category_name"] for c in data] == ["Desserts"]

    def test_food_count(self, client, make_food, category_id):
        make_food()
        make_food("Burger")
        got = client.get(f"/api/categories/{category_id}").json()["data"]
        assert got["food_count"] == 2

    def test_duplicate_name(self, client):
        client.post("/api/categories", json={"category_name": "Snacks"})
        r = client.post("/api/categories", json={"category_name": "Snacks"})
        assert r.status_code == 400
        assert r.json()["message"] == "Category name already exists"

    def test_rename_to_taken_name(self, client):
        client.post("/api/categories", json={"category_name": "Snacks"})
        other = client.post("/api/categories", json={"category_name": "Drinks"}).json()["data"]
        r = client.put(f"/api/categories/{other['id']}", json={"category_name": "Snacks"})
        assert r.status_code == 400

    def test_update(self, client, category_id):
        r = client.put(f"/api/categories/{category_id}", json={"category_name": "Mains", "description": "Big"})
        assert r.status_code == 200
        assert r.json()["data"]["category_name"] == "Mains"
        assert r.json()["data"]["description"] == "Big"

    def test_delete_in_use(self, client, make_food, category_id):
        make_food()
        r = client.delete(f"/api/categories/{category_id}")
        assert r.status_code == 400
        assert r.json()["message"] == "Cannot delete category. There are foods in this category."
        assert client.get(f"/api/categories/{category_id}").status_code == 200

    def test_delete_empty(self, client, category_id):
        assert client.delete(f"/api/categories/{category_id}").status_code == 200
        r = client.get(f"/api/categories/{category_id}")
        assert r.status_code == 404
        assert r.json()["message"] == "Category not found"

    def test_blank_name_rejected(self, client):
        r = client.post("/api/categories", json={"category_name": ""})
        assert r.status_code == 400
