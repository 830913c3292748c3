"""
Integration tests for the authentication endpoints.

Covers registration, login, the token lifecycle, profile changes, email
verification and password reset through the HTTP surface.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import jwt
import pytest

from core.config import JWT_SECRET_KEY
from core.errors import GENERIC_AUTHENTICATION_MESSAGE
from services.email_service import EmailDeliveryError


def _register(client, **overrides):
    body = {
        "name": "Mona",
        "email": "mona@example.com",
        "password": "secret123",
        "role": "parent",
    }
    body.update(overrides)
    return client.post("/api/auth/register", json=body)


class TestRegister:

    def test_register_parent(self, client):
        res = _register(client)

        assert res.status_code == 201
        data = res.json()
        assert data["success"] is True
        assert data["token"]
        assert data["user"]["role"] == "parent"
        assert data["user"]["emailVerified"] is False
        assert data["user"]["staffId"] == "PT-0001"
        assert "passwordHash" not in data["user"]

    def test_register_specialist(self, client):
        res = _register(client, role="specialist", specialization="Articulation")

        assert res.status_code == 201
        assert res.json()["user"]["specialization"] == "Articulation"

    def test_register_admin_role_rejected(self, client):
        res = _register(client, role="admin")

        assert res.status_code == 400
        assert res.json()["success"] is False

    def test_register_duplicate_email(self, client, make):
        make.specialist(email="mona@example.com")

        res = _register(client, email="MONA@example.com")

        assert res.status_code == 400
        assert res.json()["message"] == "User already exists"

    def test_register_short_password(self, client):
        res = _register(client, password="123")

        assert res.status_code == 400
        assert "at least 6" in res.json()["message"]

    def test_register_succeeds_when_email_is_down(self, client):
        with patch("services.verification_service.send_verification_email", side_effect=EmailDeliveryError("down")):
            res = _register(client)

        assert res.status_code == 201
        assert res.json()["user"]["emailVerified"] is False


class TestLogin:

    def test_login(self, client, make):
        parent = make.parent(email="login@example.com")

        res = client.post("/api/auth/login", json={"email": "Login@Example.com", "password": "secret123"})

        assert res.status_code == 200
        data = res.json()
        assert data["user"]["id"] == parent.id
        assert data["token"]

    def test_login_missing_fields(self, client):
        res = client.post("/api/auth/login", json={"email": "a@example.com"})

        assert res.status_code == 400
        assert res.json() == {"success": False, "message": "Please provide email and password"}

    def test_login_bad_credentials(self, client, make):
        make.parent(email="login@example.com")

        res = client.post("/api/auth/login", json={"email": "login@example.com", "password": "wrong"})

        assert res.status_code == 401
        assert res.json()["message"] == "Invalid credentials"


class TestTokenLifecycle:

    def test_me_without_token(self, client):
        res = client.get("/api/auth/me")

        assert res.status_code == 401
        assert res.json() == {"success": False, "message": GENERIC_AUTHENTICATION_MESSAGE}

    def test_me_with_garbage_token(self, client):
        res = client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})

        assert res.status_code == 401
        assert res.json()["message"] == GENERIC_AUTHENTICATION_MESSAGE

    def test_me_with_expired_token(self, client, make):
        parent = make.parent()
        token = jwt.encode({
            "id": parent.id, "role": "parent",
            "exp": datetime.now(timezone.utc) - timedelta(minutes=1),
        }, JWT_SECRET_KEY, algorithm="HS256")

        res = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert res.status_code == 401
        assert res.json()["message"] == GENERIC_AUTHENTICATION_MESSAGE

    def test_me_for_deleted_actor(self, client, db_session, make):
        parent = make.parent()
        headers = make.headers(parent)
        db_session.delete(parent)
        db_session.commit()

        res = client.get("/api/auth/me", headers=headers)

        assert res.status_code == 401

    def test_me_lists_parent_children(self, client, make):
        parent = make.parent()
        child = make.child(parent)

        res = client.get("/api/auth/me", headers=make.headers(parent))

        assert res.status_code == 200
        assert [c["id"] for c in res.json()["children"]] == [child.id]

    def test_me_shows_admin_center(self, client, center_setup, make):
        admin, center, _, _ = center_setup

        res = client.get("/api/auth/me", headers=make.headers(admin))

        assert res.json()["center"]["id"] == center.id

    def test_legacy_token_without_role(self, client, make):
        specialist = make.specialist()
        token = jwt.encode({
            "id": specialist.id,
            "exp": datetime.now(timezone.utc) + timedelta(hours=1),
        }, JWT_SECRET_KEY, algorithm="HS256")

        res = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert res.status_code == 200
        assert res.json()["user"]["id"] == specialist.id

    def test_refresh_token(self, client, make):
        parent = make.parent()

        res = client.post("/api/auth/refresh-token", headers=make.headers(parent))

        assert res.status_code == 200
        refreshed = jwt.decode(res.json()["token"], JWT_SECRET_KEY, algorithms=["HS256"])
        assert refreshed["id"] == parent.id
        assert refreshed["role"] == "parent"


class TestProfile:

    def test_update_profile(self, client, make):
        parent = make.parent()

        res = client.put("/api/auth/profile", json={"name": "New Name", "phone": "0912345678"},
                         headers=make.headers(parent))

        assert res.status_code == 200
        assert res.json()["user"]["name"] == "New Name"
        assert res.json()["user"]["phone"] == "0912345678"

    def test_email_change_requires_reverification(self, client, make):
        parent = make.parent(verified=True)

        res = client.put("/api/auth/profile", json={"email": "fresh@example.com"}, headers=make.headers(parent))

        assert res.status_code == 200
        assert res.json()["user"]["email"] == "fresh@example.com"
        assert res.json()["user"]["emailVerified"] is False

    def test_email_change_to_taken_address(self, client, make):
        taken = make.specialist(email="taken@example.com")
        parent = make.parent()

        res = client.put("/api/auth/profile", json={"email": taken.email}, headers=make.headers(parent))

        assert res.status_code == 400
        assert res.json()["message"] == "Email already in use"

    @pytest.mark.parametrize("blank", ["", "   "])
    def test_email_change_to_blank_is_rejected(self, client, make, blank):
        parent = make.parent(email="keep@example.com")
        headers = make.headers(parent)

        res = client.put("/api/auth/profile", json={"email": blank}, headers=headers)

        assert res.status_code == 400
        assert res.json()["message"] == "Email cannot be empty"
        assert client.get("/api/auth/me", headers=headers).json()["user"]["email"] == "keep@example.com"
        login = client.post("/api/auth/login", json={"email": "keep@example.com", "password": "secret123"})
        assert login.status_code == 200

    def test_change_password(self, client, make):
        parent = make.parent(email="pw@example.com")
        headers = make.headers(parent)

        wrong = client.put("/api/auth/change-password",
                           json={"currentPassword": "nope", "newPassword": "another1"}, headers=headers)
        ok = client.put("/api/auth/change-password",
                        json={"currentPassword": "secret123", "newPassword": "another1"}, headers=headers)

        assert wrong.status_code == 400
        assert ok.status_code == 200
        login = client.post("/api/auth/login", json={"email": "pw@example.com", "password": "another1"})
        assert login.status_code == 200


class TestEmailVerification:

    def test_verify_email_with_code(self, client, db_session):
        with patch("services.verification_service.generate_code", return_value="123456"):
            res = _register(client)
        headers = {"Authorization": f"Bearer {res.json()['token']}"}

        verify = client.post("/api/auth/verify-email", json={"token": "123456"})

        assert verify.status_code == 200
        me = client.get("/api/auth/me", headers=headers)
        assert me.json()["user"]["emailVerified"] is True

    def test_verify_email_requires_code(self, client):
        res = client.post("/api/auth/verify-email", json={})

        assert res.status_code == 400
        assert res.json()["message"] == "Verification token is required"

    def test_resend_for_verified_actor(self, client, make):
        parent = make.parent(verified=True)

        res = client.post("/api/auth/resend-verification", headers=make.headers(parent))

        assert res.status_code == 400


class TestPasswordReset:

    def test_forgot_password_same_answer_for_unknown_email(self, client, make):
        make.parent(email="known@example.com")

        known = client.post("/api/auth/forgot-password", json={"email": "known@example.com"})
        unknown = client.post("/api/auth/forgot-password", json={"email": "ghost@example.com"})

        assert known.status_code == unknown.status_code == 200
        assert known.json() == unknown.json()

    def test_reset_password_flow(self, client, make):
        make.parent(email="reset@example.com")
        with patch("services.verification_service.generate_code", return_value="246810"):
            client.post("/api/auth/forgot-password", json={"email": "reset@example.com"})

        check = client.post("/api/auth/verify-reset-token", json={"token": "246810"})
        reset = client.put("/api/auth/reset-password", json={"token": "246810", "newPassword": "fresh123"})
        reused = client.put("/api/auth/reset-password", json={"token": "246810", "newPassword": "fresh456"})

        assert check.status_code == 200
        assert reset.status_code == 200
        assert reused.status_code == 400
        login = client.post("/api/auth/login", json={"email": "reset@example.com", "password": "fresh123"})
        assert login.status_code == 200

    def test_verify_unknown_reset_code(self, client):
        res = client.post("/api/auth/verify-reset-token", json={"token": "000000"})

        assert res.status_code == 400


class TestMySpecialist:

    def test_linked_specialist(self, client, make, center_setup):
        _, center, specialist, _ = center_setup
        parent = make.parent()
        make.link(parent, specialist)

        res = client.get("/api/auth/my-specialist", headers=make.headers(parent))

        assert res.status_code == 200
        assert res.json()["specialist"]["id"] == specialist.id
        assert res.json()["center"]["id"] == center.id

    def test_no_linked_specialist(self, client, make):
        parent = make.parent()

        res = client.get("/api/auth/my-specialist", headers=make.headers(parent))

        assert res.status_code == 404

    def test_specialist_cannot_call(self, client, make):
        specialist = make.specialist()

        res = client.get("/api/auth/my-specialist", headers=make.headers(specialist))

        assert res.status_code == 403
