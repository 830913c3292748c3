"""
JWT Service for access token management.

Tokens are stateless: they embed the actor id and role, are signed with the
process-wide secret and expire after the configured lifetime. There is no
revocation list; clients re-issue through ``refresh`` while still valid.
"""

import jwt
from datetime import datetime, timedelta, timezone
from typing import Optional
from pydantic import BaseModel

from core.config import JWT_SECRET_KEY, JWT_ACCESS_TOKEN_EXPIRE_MINUTES


class InvalidToken(Exception):
    """Token is malformed, forged or expired. Causes are not distinguished."""


class TokenPayload(BaseModel):
    """Payload structure for JWT tokens."""
    id: int  # Actor id
    role: Optional[str] = None  # Missing or unknown on legacy tokens
    iat: Optional[int] = None  # Set by JWT service
    exp: Optional[int] = None  # Set by JWT service


class JWTService:
    """Service for JWT token operations."""

    ALGORITHM = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES = JWT_ACCESS_TOKEN_EXPIRE_MINUTES

    @classmethod
    def issue_token(cls, actor_id: int, role: str) -> str:
        """Create a signed access token for an actor."""
        now = datetime.now(timezone.utc)
        to_encode = {
            "id": actor_id,
            "role": role,
            "iat": now,
            "exp": now + timedelta(minutes=cls.ACCESS_TOKEN_EXPIRE_MINUTES),
        }
        return jwt.encode(to_encode, JWT_SECRET_KEY, algorithm=cls.ALGORITHM)

    @classmethod
    def verify_token(cls, token: str) -> TokenPayload:
        """
        Verify and decode an access token.

        Raises:
            InvalidToken: Bad signature, malformed token, missing id or expired
        """
        try:
            payload = jwt.decode(
                token,
                JWT_SECRET_KEY,
                algorithms=[cls.ALGORITHM],
                options={"require": ["exp"]},
            )
            return TokenPayload(**payload)
        except jwt.ExpiredSignatureError as e:
            raise InvalidToken("expired") from e
        except jwt.InvalidTokenError as e:
            raise InvalidToken("invalid") from e
        except (TypeError, ValueError) as e:
            # Signed by us but the claims do not fit TokenPayload
            raise InvalidToken("malformed payload") from e

    @classmethod
    def refresh_token(cls, token: str, role: Optional[str] = None) -> str:
        """
        Re-issue a still-valid token with a fresh expiry.

        Args:
            token: Current token; must verify
            role: Role to embed instead of the token's own (the stored role
                  wins once the actor has been resolved)

        Raises:
            InvalidToken: The current token does not verify
        """
        payload = cls.verify_token(token)
        return cls.issue_token(payload.id, role or payload.role)

    @classmethod
    def get_token_expiry(cls) -> datetime:
        """Expiry datetime for a token issued now."""
        return datetime.now(timezone.utc) + timedelta(minutes=cls.ACCESS_TOKEN_EXPIRE_MINUTES)


# Global instance
jwt_service = JWTService()
