"""
HTTP-level tests for the console API.

Verifies:
- Protected endpoints return 401 without a token
- Login/me/logout round trip
- Super admin gates return 403 for plain admins
- Catalog CRUD, exports and inventory through the routes
"""

from io import BytesIO

import httpx
import pytest

from storeconsole.models import ProductList
from storeconsole.services import upload_service


# =============================================================================
# UNAUTHENTICATED ACCESS (401)
# =============================================================================


class TestUnauthenticatedAccess:
    """All protected endpoints return 401 without a token."""

    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/api/auth/me"),
            ("GET", "/api/categories"),
            ("POST", "/api/categories"),
            ("GET", "/api/products"),
            ("POST", "/api/products"),
            ("GET", "/api/product-lists"),
            ("GET", "/api/product-lists/export.csv"),
            ("GET", "/api/product-lists/export.pdf"),
            ("GET", "/api/inventory"),
            ("GET", "/api/dashboard"),
            ("GET", "/api/admin/users"),
            ("POST", "/api/admin/setup"),
            ("GET", "/api/settings/app"),
            ("PATCH", "/api/settings/store"),
            ("POST", "/api/uploads/image"),
        ],
    )
    def test_requires_token(self, client, db_session, method, path):
        response = client.open(path, method=method)
        assert response.status_code == 401
        assert response.json["error"] == "Authentication required"

    def test_bad_token(self, client, db_session):
        response = client.get("/api/products", headers={"Authorization": "Bearer not-a-token"})
        assert response.status_code == 401
        assert response.json["error"] == "Invalid or expired token"


# =============================================================================
# AUTH
# =============================================================================


class TestAuthRoutes:
    def test_login_me_logout(self, client, super_admin):
        response = client.post("/api/auth/login", json={"email": "owner@store.test", "password": "secret123"})
        assert response.status_code == 200
        assert response.json["admin"]["role"] == "super_admin"
        headers = {"Authorization": f"Bearer {response.json['token']}"}

        me = client.get("/api/auth/me", headers=headers)
        assert me.status_code == 200
        assert me.json["identity"]["email"] == "owner@store.test"

        assert client.post("/api/auth/logout", headers=headers).status_code == 200
        assert client.get("/api/auth/me", headers=headers).status_code == 401

    def test_login_error_codes(self, client, super_admin):
        wrong = client.post("/api/auth/login", json={"email": "owner@store.test", "password": "nope-nope"})
        assert wrong.status_code == 401
        assert wrong.json == {"error": "Incorrect password.", "code": "wrong-password"}

        missing = client.post("/api/auth/login", json={"email": "ghost@store.test", "password": "secret123"})
        assert missing.json["code"] == "user-not-found"

    def test_identity_without_admin_record_can_sign_in(self, client, identity_factory):
        identity_factory("walkin@store.test")
        response = client.post("/api/auth/login", json={"email": "walkin@store.test", "password": "secret123"})
        assert response.status_code == 200
        assert response.json["admin"]["role"] == "admin"
        assert response.json["admin"]["persisted"] is False

    def test_signup_gated_by_app_settings(self, client, super_admin_headers):
        created = client.post("/api/auth/signup", json={"email": "new@store.test", "password": "secret123"})
        assert created.status_code == 201

        client.put("/api/settings/app", json={"show_sign_up": False}, headers=super_admin_headers)
        assert client.get("/api/settings/public").json == {"show_sign_up": False}

        closed = client.post("/api/auth/signup", json={"email": "other@store.test", "password": "secret123"})
        assert closed.status_code == 403
        assert closed.json["error"] == "Sign up is currently disabled"

    def test_signup_rejects_non_string_fields(self, client, db_session):
        numeric_email = client.post("/api/auth/signup", json={"email": 42, "password": "secret123"})
        assert numeric_email.status_code == 400
        assert numeric_email.json["code"] == "invalid-email"

        numeric_name = client.post("/api/auth/signup", json={
            "email": "named@store.test", "password": "secret123", "name": {"first": "Asha"},
        })
        assert numeric_name.status_code == 400
        assert numeric_name.json["error"] == "name must be a string"

    def test_password_reset_does_not_reveal_accounts(self, client, super_admin):
        known = client.post("/api/auth/password-reset", json={"email": "owner@store.test"})
        unknown = client.post("/api/auth/password-reset", json={"email": "ghost@store.test"})
        assert known.status_code == unknown.status_code == 200
        assert known.json == unknown.json


# =============================================================================
# ADMIN MANAGEMENT
# =============================================================================


class TestAdminRoutes:
    def test_plain_admin_denied(self, client, admin_headers):
        response = client.get("/api/admin/users", headers=admin_headers)
        assert response.status_code == 403
        assert response.json["error"] == "Super admin access required"

    def test_super_admin_lists_and_creates(self, client, super_admin_headers):
        created = client.post("/api/admin/users", headers=super_admin_headers, json={
            "email": "clerk@store.test", "password": "secret123", "name": "Clerk", "role": "admin",
        })
        assert created.status_code == 201

        listed = client.get("/api/admin/users", headers=super_admin_headers)
        assert listed.status_code == 200
        assert "clerk@store.test" in [u["email"] for u in listed.json["users"]]
        assert client.post("/api/auth/login", json={"email": "clerk@store.test", "password": "secret123"}).status_code == 200

    def test_duplicate_email_is_conflict(self, client, super_admin_headers, plain_admin):
        response = client.post("/api/admin/users", headers=super_admin_headers, json={
            "email": plain_admin.email, "password": "secret123", "name": "Dup",
        })
        assert response.status_code == 409
        assert response.json["code"] == "email-already-in-use"

    def test_cannot_deactivate_self(self, client, super_admin, super_admin_headers):
        response = client.post(
            f"/api/admin/users/{super_admin.id}/toggle-status",
            headers=super_admin_headers, json={"is_active": True},
        )
        assert response.status_code == 400
        assert response.json["error"] == "You cannot deactivate your own account"

    def test_toggle_and_delete_other(self, client, super_admin_headers, plain_admin):
        toggled = client.post(
            f"/api/admin/users/{plain_admin.id}/toggle-status",
            headers=super_admin_headers, json={"is_active": True},
        )
        assert toggled.json["user"]["is_active"] is False

        deleted = client.delete(f"/api/admin/users/{plain_admin.id}", headers=super_admin_headers)
        assert deleted.json == {"ok": True}

    def test_setup_promotes_caller(self, client, identity_factory, login_headers):
        identity_factory("first@store.test")
        headers = login_headers("first@store.test")

        response = client.post("/api/admin/setup", headers=headers)
        assert response.status_code == 200
        assert client.get("/api/auth/me", headers=headers).json["admin"]["role"] == "super_admin"


# =============================================================================
# CATALOG
# =============================================================================


class TestCatalogRoutes:
    def _create(self, client, headers, **overrides):
        body = {"name": "Rice", "mrp": 100, "stock": 10, "category": "Kirana"}
        body.update(overrides)
        return client.post("/api/products", json=body, headers=headers)

    def test_category_lifecycle(self, client, admin_headers):
        created = client.post("/api/categories", headers=admin_headers, json={
            "name": "Kirana", "sub_categories": [{"name": "Pulses"}],
        })
        assert created.status_code == 201
        category_id = created.json["id"]

        patched = client.patch(f"/api/categories/{category_id}/sub-categories", headers=admin_headers, json={
            "operations": [{"op": "add", "name": "Spices"}, {"op": "remove", "id": "missing"}],
        })
        assert patched.status_code == 200
        assert patched.json["applied"] == 1
        assert patched.json["skipped"] == 1
        assert [s["name"] for s in patched.json["category"]["sub_categories"]] == ["Pulses", "Spices"]

        assert client.delete(f"/api/categories/{category_id}", headers=admin_headers).json == {"ok": True}
        assert client.get(f"/api/categories/{category_id}", headers=admin_headers).status_code == 404

    def test_category_with_non_string_sub_category_name(self, client, admin_headers):
        response = client.post("/api/categories", headers=admin_headers, json={
            "name": "Kirana", "sub_categories": [{"name": 5}],
        })
        assert response.status_code == 400
        assert response.json["error"] == "name must be a string"
        assert client.get("/api/categories", headers=admin_headers).json["count"] == 0

    def test_product_create_validation(self, client, admin_headers):
        response = self._create(client, admin_headers, mrp=0)
        assert response.status_code == 400
        assert response.json["error"] == "MRP must be greater than 0"

    def test_product_crud_and_toggles(self, client, admin_headers, db_session):
        created = self._create(client, admin_headers)
        assert created.status_code == 201
        product_id = created.json["id"]
        assert db_session.get(ProductList, product_id) is not None

        updated = client.put(f"/api/products/{product_id}", headers=admin_headers, json={"mrp": 120})
        assert updated.json["mrp"] == 120.0

        toggled = client.post(f"/api/products/{product_id}/toggle-available", headers=admin_headers,
                              json={"is_available": True})
        assert toggled.json == {"id": product_id, "is_available": False}

        listed = client.get("/api/products?availability=unavailable", headers=admin_headers)
        assert [p["id"] for p in listed.json["items"]] == [product_id]

        assert client.delete(f"/api/products/{product_id}", headers=admin_headers).status_code == 200
        assert client.get(f"/api/products/{product_id}", headers=admin_headers).status_code == 404

    def test_product_list_and_csv_export(self, client, admin_headers):
        self._create(client, admin_headers, name="A,B", mrp=50, is_available=False, category="X")
        self._create(client, admin_headers, name="Silk Saree", mrp=2500, category="Saree")

        listed = client.get("/api/product-lists?search=silk", headers=admin_headers)
        assert listed.json["count"] == 1
        assert listed.json["total"] == 2
        assert listed.json["categories"] == ["Saree", "X"]

        response = client.get("/api/product-lists/export.csv?scope=unavailable", headers=admin_headers)
        assert response.status_code == 200
        assert response.mimetype == "text/csv"
        disposition = response.headers["Content-Disposition"]
        assert "attachment" in disposition
        assert "product-list-unavailable-" in disposition

        lines = response.get_data(as_text=True).split("\n")
        assert len(lines) == 2
        assert lines[1].startswith('1,"A,B","X","-",50,Active,Unavailable,')

    def test_csv_export_with_nothing_selected(self, client, admin_headers):
        self._create(client, admin_headers)

        response = client.get("/api/product-lists/export.csv?scope=unavailable", headers=admin_headers)
        assert response.status_code == 400
        assert response.json["error"] == "No products to export"

    def test_pdf_export(self, client, admin_headers):
        self._create(client, admin_headers)

        response = client.get("/api/product-lists/export.pdf", headers=admin_headers)
        assert response.status_code == 200
        assert response.mimetype == "application/pdf"
        assert response.data.startswith(b"%PDF")
        assert "Test-General-Store-Catalog-" in response.headers["Content-Disposition"]

    def test_pdf_export_errors(self, client, admin_headers):
        empty = client.get("/api/product-lists/export.pdf", headers=admin_headers)
        assert empty.status_code == 400
        assert empty.json["error"] == "No products to export"

        no_category = client.get("/api/product-lists/export.pdf?scope=category", headers=admin_headers)
        assert no_category.status_code == 400
        assert no_category.json["error"] == "Select a category to export"

    def test_inventory_and_dashboard(self, client, admin_headers):
        self._create(client, admin_headers, name="Dal", stock=0)
        self._create(client, admin_headers, name="Salt", stock=4)
        self._create(client, admin_headers, name="Rice", stock=20)

        low = client.get("/api/inventory?stock=low", headers=admin_headers)
        assert [row["name"] for row in low.json["items"]] == ["Dal", "Salt"]
        assert low.json["stats"]["out_of_stock"] == 1

        bad = client.get("/api/inventory?stock=plenty", headers=admin_headers)
        assert bad.status_code == 400

        dashboard = client.get("/api/dashboard", headers=admin_headers)
        assert dashboard.json["total_products"] == 3
        assert dashboard.json["low_stock_products"] == 2
        assert dashboard.json["uncategorized_products"] == 3


# =============================================================================
# SETTINGS, UPLOADS, HEALTH
# =============================================================================


class TestSettingsRoutes:
    def test_app_settings_super_admin_only(self, client, admin_headers):
        response = client.put("/api/settings/app", json={"show_sign_up": False}, headers=admin_headers)
        assert response.status_code == 403

    def test_store_settings_flow(self, client, admin_headers):
        assert client.get("/api/settings/store", headers=admin_headers).status_code == 404

        first = client.post("/api/settings/store/initialize", headers=admin_headers)
        second = client.post("/api/settings/store/initialize", headers=admin_headers)
        assert (first.status_code, second.status_code) == (201, 200)

        saved = client.patch("/api/settings/store?tab=hours", headers=admin_headers,
                             json={"sunday": "Closed"})
        assert saved.status_code == 200

        wrong_tab = client.patch("/api/settings/store?tab=hours", headers=admin_headers,
                                 json={"city": "Jaipur"})
        assert wrong_tab.status_code == 400


class TestUploadRoute:
    def test_upload(self, client, admin_headers, monkeypatch):
        def handler(request):
            return httpx.Response(200, json={"secure_url": "https://img.test/a.png", "public_id": "a"})

        monkeypatch.setattr(
            upload_service, "build_client",
            lambda timeout: httpx.Client(transport=httpx.MockTransport(handler), timeout=timeout),
        )

        response = client.post(
            "/api/uploads/image",
            headers=admin_headers,
            data={"file": (BytesIO(b"\x89PNG fake"), "a.png", "image/png")},
            content_type="multipart/form-data",
        )
        assert response.status_code == 200
        assert response.json == {"success": True, "url": "https://img.test/a.png", "public_id": "a"}

    def test_upload_without_file(self, client, admin_headers):
        response = client.post("/api/uploads/image", headers=admin_headers, data={},
                               content_type="multipart/form-data")
        assert response.status_code == 400
        assert response.json["error"] == "No file provided"

    def test_upload_over_request_limit(self, client, admin_headers, monkeypatch):
        def handler(request):
            raise AssertionError("host must not be called")

        monkeypatch.setattr(
            upload_service, "build_client",
            lambda timeout: httpx.Client(transport=httpx.MockTransport(handler), timeout=timeout),
        )

        response = client.post(
            "/api/uploads/image",
            headers=admin_headers,
            data={"file": (BytesIO(b"x" * (2 * 1024 * 1024)), "big.png", "image/png")},
            content_type="multipart/form-data",
        )
        assert response.status_code == 413
        assert response.json["error"] == "File too large. Maximum size is 1MB."


class TestHealth:
    def test_health(self, client, db_session):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json["status"] == "healthy"

    def test_degraded_when_mirror_missing(self, client, db_session, admin_headers):
        created = client.post("/api/products", headers=admin_headers,
                              json={"name": "Rice", "mrp": 100, "category": "Kirana"})
        db_session.delete(db_session.get(ProductList, created.json["id"]))
        db_session.commit()

        assert client.get("/health").json["status"] == "degraded"

    def test_cors_exposes_content_disposition(self, client, db_session):
        response = client.get("/health", headers={"Origin": "http://localhost:3000"})
        assert response.headers["Access-Control-Allow-Origin"] == "http://localhost:3000"
        assert "Content-Disposition" in response.headers["Access-Control-Expose-Headers"]
