# pyright: reportMissingTypeStubs=false
"""
Authentication and authorization dependencies for FastAPI.

Each request moves through Unauthenticated -> TokenVerified -> ActorResolved
and ends Authorized or Denied. Token and actor problems deny with 401 and
the generic message; role and relationship problems deny with 403.
"""

import logging
from typing import Callable, Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from core.database import get_db
from core.errors import AuthenticationError, AuthorizationError
from models import Actor, ActorRole, Admin, Center, Parent, Specialist
from services.actor_resolver import ActorNotFound, resolve_actor
from services.jwt_service import InvalidToken, TokenPayload, jwt_service
from services.link_graph import LinkGraph

logger = logging.getLogger(__name__)


class ActorContext:
    """Authenticated actor extracted from a verified token."""

    def __init__(self, actor: Actor, token: str, payload: TokenPayload):
        self.actor = actor
        self.token = token
        self.payload = payload

    @property
    def role(self) -> ActorRole:
        # Stored roles are always members of ActorRole
        return ActorRole(self.actor.role)

    @property
    def actor_id(self) -> int:
        return self.actor.id

    def has_role(self, *roles: ActorRole) -> bool:
        return self.role in roles

    def is_parent(self) -> bool:
        return isinstance(self.actor, Parent)

    def is_specialist(self) -> bool:
        return isinstance(self.actor, Specialist)

    def __repr__(self) -> str:
        return f"ActorContext(actor_id={self.actor.id}, role='{self.actor.role}')"


class CenterAdminContext(ActorContext):
    """Admin context with the administered center already resolved."""

    def __init__(self, context: ActorContext, center: Center):
        super().__init__(context.actor, context.token, context.payload)
        self.center = center

    @property
    def admin(self) -> Admin:
        return self.actor  # type: ignore[return-value]


# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


def get_token_payload(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> TokenPayload:
    """Extract and verify the bearer token."""
    if not credentials or not credentials.credentials:
        raise AuthenticationError()

    try:
        return jwt_service.verify_token(credentials.credentials)
    except InvalidToken as e:
        logger.info(f"Rejected token: {e}")
        raise AuthenticationError()


def get_current_actor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    payload: TokenPayload = Depends(get_token_payload),
    db: Session = Depends(get_db)
) -> ActorContext:
    """Resolve the token's actor in the store of its role."""
    try:
        actor = resolve_actor(db, payload)
    except ActorNotFound:
        logger.info(f"Token for missing actor {payload.id} (role {payload.role})")
        raise AuthenticationError()

    return ActorContext(actor=actor, token=credentials.credentials, payload=payload)


# Role-based authorization dependencies
def require_roles(*roles: ActorRole) -> Callable[..., ActorContext]:
    """
    Dependency factory admitting only the given roles.

    Example:
        ```python
        @router.post("/")
        async def create(ctx: ActorContext = Depends(require_roles(ActorRole.SPECIALIST))):
        ```
    """
    allowed = frozenset(roles)

    def dependency(ctx: ActorContext = Depends(get_current_actor)) -> ActorContext:
        if ctx.role not in allowed:
            logger.info(f"Role '{ctx.actor.role}' denied; requires {sorted(r.value for r in allowed)}")
            raise AuthorizationError()
        return ctx

    return dependency


require_parent = require_roles(ActorRole.PARENT)
require_specialist = require_roles(ActorRole.SPECIALIST)
require_parent_or_specialist = require_roles(ActorRole.PARENT, ActorRole.SPECIALIST)
require_superadmin = require_roles(ActorRole.SUPERADMIN)


def require_email_verified(ctx: ActorContext = Depends(get_current_actor)) -> ActorContext:
    """Deny actors whose email is not verified, regardless of role."""
    if not ctx.actor.email_verified:
        raise AuthorizationError("Email verification required to access this resource")
    return ctx


def require_center_admin(
    ctx: ActorContext = Depends(require_roles(ActorRole.ADMIN)),
    db: Session = Depends(get_db)
) -> CenterAdminContext:
    """Center admin whose center pointer and the center's back-reference agree."""
    center = LinkGraph.center_of(db, ctx.actor)  # type: ignore[arg-type]
    return CenterAdminContext(ctx, center)
