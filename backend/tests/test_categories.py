"""
Category API tests.

Verifies:
- Names are required, trimmed and unique
- Deletion is rejected while any product references the category
- List carries per-category product counts
"""

from stockmaster.extensions import db
from stockmaster.models import ActivityLog, Category


class TestCategories:
    def test_create_and_list(self, client, headers, make_product):
        resp = client.post("/api/categories", json={"name": "  Fasteners ", "description": "Nuts"}, headers=headers)
        assert resp.status_code == 201
        created = resp.get_json()
        assert created["name"] == "Fasteners"
        assert created["product_count"] == 0

        client.post("/api/categories", json={"name": "Adhesives"}, headers=headers)
        make_product("NUT-1", 3, category_id=created["id"])

        listed = client.get("/api/categories", headers=headers).get_json()
        assert [c["name"] for c in listed] == ["Adhesives", "Fasteners"]
        assert [c["product_count"] for c in listed] == [0, 1]

    def test_name_required(self, client, headers):
        resp = client.post("/api/categories", json={"name": "   "}, headers=headers)
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Category name is required"

    def test_duplicate_name(self, client, headers, category):
        resp = client.post("/api/categories", json={"name": "Widgets"}, headers=headers)
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Category name already exists"

    def test_rename_logs_old_and_new_name(self, client, headers, category):
        resp = client.put(f"/api/categories/{category.id}", json={"name": "Gadgets"}, headers=headers)
        assert resp.status_code == 200
        assert resp.get_json()["name"] == "Gadgets"

        entry = db.session.query(ActivityLog).filter_by(type="CATEGORY_UPDATED").one()
        assert entry.details == {"old_name": "Widgets", "new_name": "Gadgets"}

    def test_update_missing(self, client, headers):
        resp = client.put("/api/categories/999", json={"name": "x"}, headers=headers)
        assert resp.status_code == 404


class TestCategoryDeleteGuard:
    def test_delete_in_use_is_rejected(self, client, headers, category, product):
        resp = client.delete(f"/api/categories/{category.id}", headers=headers)
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Cannot delete category with existing products"

        db.session.expire_all()
        assert db.session.get(Category, category.id) is not None

    def test_delete_after_products_are_gone(self, client, headers, category, product):
        category_id = category.id
        assert client.delete(f"/api/products/{product.id}", headers=headers).status_code == 200

        resp = client.delete(f"/api/categories/{category_id}", headers=headers)
        assert resp.status_code == 200
        assert resp.get_json() == {"message": "Category deleted successfully"}

        db.session.expire_all()
        assert db.session.get(Category, category_id) is None
        assert db.session.query(ActivityLog).filter_by(type="CATEGORY_DELETED").count() == 1

    def test_delete_missing(self, client, headers):
        assert client.delete("/api/categories/999", headers=headers).status_code == 404
