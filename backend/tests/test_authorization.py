import pytest
from fastapi.testclient import TestClient

from canteen.main import create_app
from canteen.schemas import Role
from canteen.services.authorization import (
    ROLES_HIERARCHY, allowed_pages, can_open, can_perform, has_authority,
)

from conftest import PASSWORD, bearer, signup


class TestHierarchy:
    def test_admin_covers_everyone(self):
        for role in Role:
            assert has_authority(Role.ADMIN, role)

    def test_manager_covers_all_but_admin(self):
        assert not has_authority(Role.MANAGER, Role.ADMIN)
        for role in (Role.MANAGER, Role.CASHIER, Role.STAFF):
            assert has_authority("Manager", role)

    @pytest.mark.parametrize("role", [Role.CASHIER, Role.STAFF])
    def test_leaf_roles_cover_only_themselves(self, role):
        assert ROLES_HIERARCHY[role] == [role]
        assert [r for r in Role if has_authority(role, r)] == [role]

    def test_unknown_role_has_nothing(self):
        assert not has_authority("Owner", Role.STAFF)
        assert allowed_pages("Owner") == []

    def test_navigation(self):
        assert allowed_pages(Role.STAFF) == ["Settings"]
        assert "Dashboard" in allowed_pages(Role.MANAGER)
        assert not can_open(Role.MANAGER, "Users")
        assert can_open(Role.ADMIN, "Users")

    def test_route_permissions(self):
        assert can_perform(Role.CASHIER, "orders", "write")
        assert not can_perform(Role.CASHIER, "products", "write")
        assert not can_perform(Role.STAFF, "orders", "read")
        assert can_perform(Role.STAFF, "unlisted", "write")


class TestPermissiveDefault:
    def test_cashier_can_use_every_collection(self, client, cashier_headers):
        response = client.post("/api/suppliers", headers=cashier_headers, json={
            "name": "Fresh Farms", "contactPerson": "Gina",
        })
        assert response.status_code == 201
        assert client.get("/api/users", headers=cashier_headers).status_code == 200
        assert client.get("/api/dashboard/stats", headers=cashier_headers).status_code == 200

    def test_audit_log_is_admin_only(self, client, admin_headers, cashier_headers):
        assert client.get("/api/admin/audit-logs", headers=cashier_headers).status_code == 403
        assert client.get("/api/admin/audit-logs", headers=admin_headers).status_code == 200


class TestEnforcedPermissions:
    @pytest.fixture
    def strict_client(self, settings):
        settings.enforce_role_permissions = True
        with TestClient(create_app(settings)) as client:
            yield client

    def test_roles_are_checked_per_route(self, strict_client):
        admin = bearer(signup(strict_client, "Alice", "alice@canteen.io")["token"])
        cashier = bearer(signup(strict_client, "Carl", "carl@canteen.io")["token"])

        supplier = {"name": "Fresh Farms", "contactPerson": "Gina"}
        assert strict_client.post("/api/suppliers", json=supplier, headers=cashier).status_code == 403
        assert strict_client.post("/api/suppliers", json=supplier, headers=admin).status_code == 201

        assert strict_client.get("/api/users", headers=cashier).status_code == 403
        assert strict_client.get("/api/products", headers=cashier).status_code == 200
        assert strict_client.get("/api/orders", headers=cashier).status_code == 200
        assert strict_client.get("/api/dashboard/stats", headers=cashier).status_code == 403

    def test_promoted_user_gains_access(self, strict_client):
        admin = bearer(signup(strict_client, "Alice", "alice@canteen.io")["token"])
        carl = signup(strict_client, "Carl", "carl@canteen.io")
        strict_client.put(f"/api/users/{carl['user']['id']}", json={"role": "Manager"}, headers=admin)

        token = strict_client.post("/api/auth/login", json={"email": "carl@canteen.io", "password": PASSWORD}).json()["token"]
        assert strict_client.get("/api/dashboard/stats", headers=bearer(token)).status_code == 200
