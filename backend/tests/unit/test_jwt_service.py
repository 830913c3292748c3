"""
Tests for JWT service functionality.
"""

import jwt
import pytest
from datetime import datetime, timedelta, timezone

from core.config import JWT_SECRET_KEY
from services.jwt_service import InvalidToken, TokenPayload, jwt_service


def _encode(payload: dict, secret: str = JWT_SECRET_KEY) -> str:
    return jwt.encode(payload, secret, algorithm="HS256")


class TestJWTService:
    """Test token issue, verification and refresh."""

    def test_issue_and_verify_token(self):
        token = jwt_service.issue_token(42, "specialist")

        payload = jwt_service.verify_token(token)

        assert isinstance(payload, TokenPayload)
        assert payload.id == 42
        assert payload.role == "specialist"
        assert payload.exp is not None

    def test_token_expires_after_configured_lifetime(self):
        before = datetime.now(timezone.utc)
        payload = jwt_service.verify_token(jwt_service.issue_token(1, "parent"))

        lifetime = timedelta(minutes=jwt_service.ACCESS_TOKEN_EXPIRE_MINUTES)
        expires = datetime.fromtimestamp(payload.exp, tz=timezone.utc)
        assert before + lifetime - timedelta(seconds=5) <= expires <= before + lifetime + timedelta(seconds=5)

    def test_verify_token_expired(self):
        token = _encode({
            "id": 1,
            "role": "parent",
            "exp": datetime.now(timezone.utc) - timedelta(hours=1),
        })

        with pytest.raises(InvalidToken):
            jwt_service.verify_token(token)

    def test_verify_token_forged_signature(self):
        token = _encode({
            "id": 1,
            "role": "admin",
            "exp": datetime.now(timezone.utc) + timedelta(hours=1),
        }, secret="someone-else")

        with pytest.raises(InvalidToken):
            jwt_service.verify_token(token)

    def test_verify_token_malformed(self):
        with pytest.raises(InvalidToken):
            jwt_service.verify_token("invalid.jwt.token")

    def test_verify_token_without_expiry_is_rejected(self):
        token = _encode({"id": 1, "role": "parent"})

        with pytest.raises(InvalidToken):
            jwt_service.verify_token(token)

    def test_verify_token_without_actor_id_is_rejected(self):
        token = _encode({
            "role": "parent",
            "exp": datetime.now(timezone.utc) + timedelta(hours=1),
        })

        with pytest.raises(InvalidToken):
            jwt_service.verify_token(token)

    def test_legacy_token_without_role_verifies(self):
        token = _encode({
            "id": 7,
            "exp": datetime.now(timezone.utc) + timedelta(hours=1),
        })

        payload = jwt_service.verify_token(token)

        assert payload.id == 7
        assert payload.role is None

    def test_refresh_token_keeps_identity(self):
        token = jwt_service.issue_token(9, "parent")

        refreshed = jwt_service.verify_token(jwt_service.refresh_token(token))

        assert refreshed.id == 9
        assert refreshed.role == "parent"

    def test_refresh_token_embeds_given_role(self):
        token = jwt_service.issue_token(9, "legacy")

        refreshed = jwt_service.verify_token(jwt_service.refresh_token(token, role="specialist"))

        assert refreshed.role == "specialist"

    def test_refresh_rejects_invalid_token(self):
        with pytest.raises(InvalidToken):
            jwt_service.refresh_token("not-a-token")
