"""
Catalog and user management API tests.

Verifies:
- Product/location CRUD with duplicate-key conflicts (409)
- Unit vocabulary and strict field validation (400)
- User create/update: role defaults, explicit permissions, password rules
- Password hashes never leave the API
"""


class TestProducts:

    def _create(self, client, headers, **overrides):
        body = {"code": "C1", "name": "Widget", "category": "Hardware", "unit": "pieces"}
        body.update(overrides)
        return client.post("/api/products", json=body, headers=headers)

    def test_create_list_update_delete(self, client, admin_headers):
        created = self._create(client, admin_headers)
        assert created.status_code == 201
        product_id = created.json["id"]

        listed = client.get("/api/products", headers=admin_headers).json
        assert [p["id"] for p in listed] == [product_id]

        resp = client.patch(f"/api/products/{product_id}", json={"name": "Big Widget"}, headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json["name"] == "Big Widget"
        assert resp.json["code"] == "C1"

        assert client.delete(f"/api/products/{product_id}", headers=admin_headers).status_code == 200
        assert client.get(f"/api/products/{product_id}", headers=admin_headers).status_code == 404

    def test_duplicate_code_conflict(self, client, admin_headers):
        self._create(client, admin_headers)
        assert self._create(client, admin_headers, name="Other").status_code == 409

    def test_update_to_existing_code_conflict(self, client, admin_headers):
        self._create(client, admin_headers)
        second = self._create(client, admin_headers, code="C2").json
        resp = client.patch(f"/api/products/{second['id']}", json={"code": "C1"}, headers=admin_headers)
        assert resp.status_code == 409

    def test_unknown_unit_rejected(self, client, admin_headers):
        assert self._create(client, admin_headers, unit="pallets").status_code == 400

    def test_missing_field_rejected(self, client, admin_headers):
        resp = client.post("/api/products", json={"code": "C1"}, headers=admin_headers)
        assert resp.status_code == 400

    def test_unknown_field_rejected(self, client, admin_headers):
        assert self._create(client, admin_headers, price=10).status_code == 400

    def test_missing_product_404(self, client, admin_headers):
        assert client.patch("/api/products/nope", json={"name": "x"}, headers=admin_headers).status_code == 404
        assert client.delete("/api/products/nope", headers=admin_headers).status_code == 404


class TestLocations:

    def test_duplicate_name_conflict(self, client, admin_headers):
        assert client.post("/api/locations", json={"name": "Depot"}, headers=admin_headers).status_code == 201
        assert client.post("/api/locations", json={"name": "Depot"}, headers=admin_headers).status_code == 409

    def test_address_optional(self, client, admin_headers):
        resp = client.post("/api/locations", json={"name": "Depot"}, headers=admin_headers)
        assert resp.json["address"] is None
        resp = client.patch(
            f"/api/locations/{resp.json['id']}", json={"address": "1 High St"}, headers=admin_headers,
        )
        assert resp.json["address"] == "1 High St"

    def test_blank_name_rejected(self, client, admin_headers):
        assert client.post("/api/locations", json={"name": "   "}, headers=admin_headers).status_code == 400

    def test_dispatcher_can_read_but_not_write(self, client, dispatch_headers):
        assert client.get("/api/locations", headers=dispatch_headers).status_code == 200
        resp = client.post("/api/locations", json={"name": "Depot"}, headers=dispatch_headers)
        # dispatch role default includes "locations"
        assert resp.status_code == 201


class TestUsers:

    def test_list_hides_password_hash(self, client, admin_headers):
        users = client.get("/api/users", headers=admin_headers).json
        assert len(users) == 4
        assert all("passwordHash" not in u for u in users)

    def test_create_uses_role_defaults(self, client, admin_headers):
        resp = client.post("/api/users", json={
            "email": "new@fairfield.com", "name": "New", "role": "receiver", "password": "Str0ng!Pass",
        }, headers=admin_headers)
        assert resp.status_code == 201
        assert set(resp.json["permissions"]) == {"dashboard", "products", "locations", "receive", "all-transfers"}
        assert "passwordHash" not in resp.json

    def test_create_with_explicit_permissions(self, client, admin_headers):
        resp = client.post("/api/users", json={
            "email": "new@fairfield.com", "name": "New", "role": "receiver",
            "password": "Str0ng!Pass", "permissions": ["reports", "dashboard", "reports"],
        }, headers=admin_headers)
        assert resp.json["permissions"] == ["dashboard", "reports"]

    def test_weak_password_rejected(self, client, admin_headers):
        resp = client.post("/api/users", json={
            "email": "new@fairfield.com", "name": "New", "role": "receiver", "password": "weak",
        }, headers=admin_headers)
        assert resp.status_code == 400

    def test_duplicate_email_conflict(self, client, admin_headers):
        resp = client.post("/api/users", json={
            "email": "dispatch@fairfield.com", "name": "Dup", "role": "dispatch", "password": "Str0ng!Pass",
        }, headers=admin_headers)
        assert resp.status_code == 409

    def test_unknown_role_and_permission_rejected(self, client, admin_headers):
        base = {"email": "new@fairfield.com", "name": "New", "password": "Str0ng!Pass"}
        assert client.post("/api/users", json={**base, "role": "owner"}, headers=admin_headers).status_code == 400
        resp = client.post("/api/users", json={**base, "role": "dispatch", "permissions": ["root"]},
                           headers=admin_headers)
        assert resp.status_code == 400

    def test_role_change_resets_permissions(self, client, seed, admin_headers):
        user_id = seed["dispatch"]["id"]
        resp = client.patch(f"/api/users/{user_id}", json={"role": "view_only"}, headers=admin_headers)
        assert resp.status_code == 200
        assert set(resp.json["permissions"]) == {"dashboard", "products", "locations", "all-transfers", "reports"}

    def test_role_change_keeps_explicit_permissions(self, client, seed, admin_headers):
        user_id = seed["dispatch"]["id"]
        resp = client.patch(
            f"/api/users/{user_id}",
            json={"role": "receiver", "permissions": ["receive"]},
            headers=admin_headers,
        )
        assert resp.json["role"] == "receiver"
        assert resp.json["permissions"] == ["receive"]

    def test_password_change_allows_new_login(self, client, seed, admin_headers):
        from conftest import get_auth_token

        user_id = seed["receiver"]["id"]
        resp = client.patch(f"/api/users/{user_id}", json={"password": "N3w!Password"}, headers=admin_headers)
        assert resp.status_code == 200
        assert get_auth_token(client, "receiver@fairfield.com", "N3w!Password")
        assert get_auth_token(client, "receiver@fairfield.com") is None

    def test_delete_user(self, client, seed, admin_headers):
        user_id = seed["view_only"]["id"]
        assert client.delete(f"/api/users/{user_id}", headers=admin_headers).status_code == 200
        assert client.delete(f"/api/users/{user_id}", headers=admin_headers).status_code == 404
