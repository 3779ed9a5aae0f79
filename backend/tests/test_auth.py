"""
Authentication tests.

Verifies:
- Register/login issue bearer tokens carrying userId and email
- Missing token -> 401, invalid or expired token -> 403
- Profile reads/updates and profile picture upload/removal
"""

import io
import os
from datetime import timedelta

import pytest
from jose import jwt

from stockmaster.extensions import db
from stockmaster.models import ActivityLog, User, UserSettings
from stockmaster.services import auth_service
from stockmaster.time_utils import utcnow

from conftest import auth_headers


class TestRegister:
    def test_register_returns_token_and_user(self, client, db_session):
        resp = client.post("/api/auth/register", json={
            "name": "Ada",
            "email": "Ada@Example.com",
            "password": "secret123",
            "company_name": "Ada Tools",
        })
        assert resp.status_code == 201
        data = resp.get_json()
        assert data["message"] == "User created successfully"
        assert data["user"]["email"] == "ada@example.com"
        assert "password_hash" not in data["user"]

        claims = auth_service.decode_access_token(data["token"])
        assert claims["userId"] == data["user"]["id"]
        assert claims["email"] == "ada@example.com"

        assert db.session.query(UserSettings).filter_by(user_id=data["user"]["id"]).count() == 1
        assert db.session.query(ActivityLog).filter_by(type="USER_REGISTERED").count() == 1

    def test_password_is_hashed(self, user):
        stored = db.session.get(User, user.id)
        assert stored.password_hash != "secret123"
        assert auth_service.verify_password("secret123", stored.password_hash)

    @pytest.mark.parametrize("missing", ["name", "email", "password"])
    def test_required_fields(self, client, db_session, missing):
        body = {"name": "Ada", "email": "ada@example.com", "password": "secret123"}
        body.pop(missing)
        resp = client.post("/api/auth/register", json=body)
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Name, email, and password are required"

    def test_short_password(self, client, db_session):
        resp = client.post("/api/auth/register", json={"name": "Ada", "email": "a@b.co", "password": "123"})
        assert resp.status_code == 400

    def test_duplicate_email(self, client, user):
        resp = client.post("/api/auth/register", json={
            "name": "Copy",
            "email": "OWNER@shop.test",
            "password": "secret123",
        })
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Email already exists"


class TestLogin:
    def test_login_success(self, client, user):
        resp = client.post("/api/auth/login", json={"email": "owner@shop.test", "password": "secret123"})
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["message"] == "Login successful"
        assert data["user"]["id"] == user.id
        assert db.session.query(ActivityLog).filter_by(type="USER_LOGIN").count() == 1

    @pytest.mark.parametrize("email,password", [
        ("owner@shop.test", "wrong-password"),
        ("nobody@shop.test", "secret123"),
    ])
    def test_bad_credentials(self, client, user, email, password):
        resp = client.post("/api/auth/login", json={"email": email, "password": password})
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Invalid email or password"

    def test_missing_fields(self, client, db_session):
        resp = client.post("/api/auth/login", json={"email": "owner@shop.test"})
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Email and password are required"


class TestTokenEnforcement:
    @pytest.mark.parametrize("method,path", [
        ("GET", "/api/products"),
        ("POST", "/api/products"),
        ("POST", "/api/products/1/adjust-stock"),
        ("GET", "/api/categories"),
        ("GET", "/api/inventory-transactions"),
        ("GET", "/api/activity-logs"),
        ("GET", "/api/dashboard/stats"),
        ("GET", "/api/alerts/low-stock"),
        ("GET", "/api/profile"),
        ("GET", "/api/user-settings"),
    ])
    def test_requires_token(self, client, db_session, method, path):
        resp = getattr(client, method.lower())(path)
        assert resp.status_code == 401, f"{method} {path} returned {resp.status_code}"
        assert resp.get_json()["message"] == "Access token required"

    def test_garbage_token(self, client, db_session):
        resp = client.get("/api/products", headers=auth_headers("not-a-token"))
        assert resp.status_code == 403
        assert resp.get_json()["message"] == "Invalid token"

    def test_wrong_secret(self, client, user):
        forged = jwt.encode({"userId": user.id, "email": user.email}, "other-secret", algorithm="HS256")
        assert client.get("/api/products", headers=auth_headers(forged)).status_code == 403

    def test_expired_token(self, client, app, user):
        expired = jwt.encode(
            {"userId": user.id, "email": user.email, "exp": utcnow() - timedelta(minutes=1)},
            app.config["JWT_SECRET"],
            algorithm="HS256",
        )
        assert client.get("/api/products", headers=auth_headers(expired)).status_code == 403

    def test_valid_token(self, client, headers):
        assert client.get("/api/products", headers=headers).status_code == 200


class TestProfile:
    def test_get_profile(self, client, headers, user):
        resp = client.get("/api/profile", headers=headers)
        assert resp.status_code == 200
        assert resp.get_json()["user"]["company_name"] == "Test Shop"

    def test_update_profile(self, client, headers):
        resp = client.put("/api/profile", json={
            "name": "New Name",
            "email": "new@shop.test",
            "company_name": "New Co",
        }, headers=headers)
        assert resp.status_code == 200
        assert resp.get_json()["user"]["email"] == "new@shop.test"
        assert db.session.query(ActivityLog).filter_by(type="PROFILE_UPDATED").count() == 1

    def test_update_profile_email_taken(self, client, headers, other_user):
        resp = client.put("/api/profile", json={"name": "X", "email": other_user.email}, headers=headers)
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Email already exists"

    def test_profile_of_deleted_user(self, client, headers, user):
        db.session.delete(db.session.get(User, user.id))
        db.session.commit()
        assert client.get("/api/profile", headers=headers).status_code == 404

    def test_upload_and_remove_picture(self, client, app, headers):
        resp = client.post(
            "/api/upload-profile-picture",
            data={"profile_picture": (io.BytesIO(b"\x89PNG fake image"), "me.png", "image/png")},
            content_type="multipart/form-data",
            headers=headers,
        )
        assert resp.status_code == 200
        picture = resp.get_json()["user"]["profile_picture"]
        assert picture.startswith("/uploads/profile-")
        assert picture.endswith(".png")

        stored = os.path.join(app.config["UPLOAD_FOLDER"], os.path.basename(picture))
        assert os.path.exists(stored)
        assert client.get(picture).status_code == 200

        resp = client.delete("/api/profile/picture", headers=headers)
        assert resp.status_code == 200
        assert resp.get_json()["user"]["profile_picture"] is None
        assert not os.path.exists(stored)

    def test_upload_rejects_non_images(self, client, headers):
        resp = client.post(
            "/api/upload-profile-picture",
            data={"profile_picture": (io.BytesIO(b"hello"), "notes.txt", "text/plain")},
            content_type="multipart/form-data",
            headers=headers,
        )
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Only image files are allowed!"

    def test_upload_requires_file(self, client, headers):
        resp = client.post("/api/upload-profile-picture", data={}, content_type="multipart/form-data", headers=headers)
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "No file uploaded"
