"""Tests for admin accounts: login, profile, management and password changes."""
from app.auth.security import verify_password
from app.config import settings
from app.models.admin import Admin, Role
from app.services import admin_service
from tests.conftest import TEST_PASSWORD, auth_headers, create_test_admin


class TestLogin:
    def test_login_returns_working_token(self, client, admin):
        resp = client.post("/api/admin/login", json={"username": "alice", "password": TEST_PASSWORD})
        assert resp.status_code == 200
        data = resp.json()
        assert data["user"]["username"] == "alice"
        assert data["user"]["role"] == "admin"
        assert data["user"]["last_login"] is not None

        me = client.get("/api/admin/me", headers={"Authorization": f"Bearer {data['token']}"})
        assert me.status_code == 200
        assert me.json()["admin_id"] == admin.admin_id

    def test_wrong_password(self, client, admin):
        resp = client.post("/api/admin/login", json={"username": "alice", "password": "wrong"})
        assert resp.status_code == 401
        assert resp.json()["error"] == "Invalid credentials"

    def test_unknown_user(self, client):
        resp = client.post("/api/admin/login", json={"username": "nobody", "password": "x"})
        assert resp.status_code == 401

    def test_missing_fields(self, client):
        resp = client.post("/api/admin/login", json={"username": "alice"})
        assert resp.status_code == 400


class TestAdminManagement:
    def test_super_admin_creates_admin(self, client, super_admin):
        resp = client.post("/api/admin/create", json={
            "username": "dave", "email": "dave@example.com", "password": "pw12345",
        }, headers=auth_headers(super_admin))
        assert resp.status_code == 201
        data = resp.json()
        assert data["role"] == "admin"
        assert data["created_by"] == super_admin.admin_id

        login = client.post("/api/admin/login", json={"username": "dave", "password": "pw12345"})
        assert login.status_code == 200

    def test_duplicate_username_or_email(self, client, admin, super_admin):
        resp = client.post("/api/admin/create", json={
            "username": "someone", "email": "alice@example.com", "password": "pw",
        }, headers=auth_headers(super_admin))
        assert resp.status_code == 400
        assert resp.json()["error"] == "Username or email already exists"

    def test_unknown_role(self, client, super_admin):
        resp = client.post("/api/admin/create", json={
            "username": "eve", "email": "eve@example.com", "password": "pw", "role": "owner",
        }, headers=auth_headers(super_admin))
        assert resp.status_code == 400
        assert resp.json()["field"] == "role"

    def test_admin_cannot_manage_admins(self, client, admin, other_admin):
        headers = auth_headers(admin)
        assert client.get("/api/admin/list", headers=headers).status_code == 403
        assert client.post("/api/admin/create", json={
            "username": "x", "email": "x@example.com", "password": "pw",
        }, headers=headers).status_code == 403
        assert client.delete(f"/api/admin/{other_admin.admin_id}", headers=headers).status_code == 403

    def test_list(self, client, admin, super_admin):
        resp = client.get("/api/admin/list", headers=auth_headers(super_admin))
        assert resp.status_code == 200
        assert {a["username"] for a in resp.json()} == {"alice", "root"}
        assert all("password_hash" not in a for a in resp.json())

    def test_cannot_delete_self(self, client, super_admin):
        resp = client.delete(f"/api/admin/{super_admin.admin_id}", headers=auth_headers(super_admin))
        assert resp.status_code == 400

    def test_delete_unknown(self, client, super_admin):
        resp = client.delete("/api/admin/missing", headers=auth_headers(super_admin))
        assert resp.status_code == 404

    def test_demotion_applies_to_existing_tokens(self, client, db, super_admin):
        """Role is read from the database, not from the token."""
        deputy = create_test_admin(db, "deputy", Role.super_admin)
        headers = auth_headers(deputy)
        deputy.role = Role.admin
        db.commit()
        assert client.get("/api/events/pending", headers=headers).status_code == 403


class TestChangePassword:
    def test_change_own_password(self, client, db, admin):
        resp = client.put("/api/admin/change-password", json={
            "current_password": TEST_PASSWORD, "new_password": "n3w-pass",
        }, headers=auth_headers(admin))
        assert resp.status_code == 200
        db.expire_all()
        assert verify_password("n3w-pass", db.get(Admin, admin.admin_id).password_hash)

    def test_wrong_current_password(self, client, admin):
        resp = client.put("/api/admin/change-password", json={
            "current_password": "nope", "new_password": "n3w-pass",
        }, headers=auth_headers(admin))
        assert resp.status_code == 401

    def test_current_password_required(self, client, admin):
        resp = client.put("/api/admin/change-password", json={"new_password": "n3w-pass"}, headers=auth_headers(admin))
        assert resp.status_code == 400

    def test_super_admin_resets_other(self, client, db, admin, super_admin):
        resp = client.put("/api/admin/change-password", json={
            "new_password": "reset-pass", "target_admin_id": admin.admin_id,
        }, headers=auth_headers(super_admin))
        assert resp.status_code == 200
        login = client.post("/api/admin/login", json={"username": "alice", "password": "reset-pass"})
        assert login.status_code == 200

    def test_admin_cannot_reset_other(self, client, admin, other_admin):
        resp = client.put("/api/admin/change-password", json={
            "new_password": "x", "target_admin_id": other_admin.admin_id,
        }, headers=auth_headers(admin))
        assert resp.status_code == 403


class TestBootstrap:
    def test_creates_configured_super_admin_once(self, db, monkeypatch):
        monkeypatch.setattr(settings, "BOOTSTRAP_SUPERADMIN_USERNAME", "owner")
        monkeypatch.setattr(settings, "BOOTSTRAP_SUPERADMIN_PASSWORD", "boot-pass")
        first = admin_service.ensure_bootstrap_superadmin(db)
        second = admin_service.ensure_bootstrap_superadmin(db)
        assert first.role == Role.super_admin
        assert first.email == "owner@localhost"
        assert second.admin_id == first.admin_id
        assert db.query(Admin).count() == 1

    def test_noop_when_unset(self, db, monkeypatch):
        monkeypatch.setattr(settings, "BOOTSTRAP_SUPERADMIN_USERNAME", "")
        assert admin_service.ensure_bootstrap_superadmin(db) is None
