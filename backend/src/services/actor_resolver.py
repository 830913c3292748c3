"""
Actor resolution for verified tokens.

Routes the token's id to the store of the token's role. Tokens minted before
roles were embedded (or carrying an unknown role) go through the legacy path,
which tries parents, then specialists, then admins.
"""

import logging
from typing import Optional, Type

from sqlalchemy.orm import Session

from models import Actor, ActorRole, Parent, Specialist, Admin
from services.jwt_service import TokenPayload

logger = logging.getLogger(__name__)


class ActorNotFound(Exception):
    """No actor matches the token in the applicable store(s)."""


_LEGACY_LOOKUP_ORDER: tuple[Type[Actor], ...] = (Parent, Specialist, Admin)


def _find(db: Session, model: Type[Actor], actor_id: int) -> Optional[Actor]:
    return db.query(model).filter(model.id == actor_id).first()


def store_for_role(role: ActorRole) -> Type[Actor]:
    """Profile class holding actors of the given role."""
    match role:
        case ActorRole.PARENT:
            return Parent
        case ActorRole.SPECIALIST:
            return Specialist
        case ActorRole.ADMIN | ActorRole.SUPERADMIN:
            return Admin


def resolve_actor(db: Session, payload: TokenPayload) -> Actor:
    """
    Load the actor a verified token refers to.

    Raises:
        ActorNotFound: The actor was deleted after issuance, or the id does not
            belong to the role's store
    """
    role = ActorRole.parse(payload.role)

    if role is not None:
        actor = _find(db, store_for_role(role), payload.id)
    else:
        logger.info(f"Resolving legacy token without a known role for actor {payload.id}")
        actor = None
        for model in _LEGACY_LOOKUP_ORDER:
            actor = _find(db, model, payload.id)
            if actor is not None:
                break

    if actor is None:
        raise ActorNotFound(payload.id)
    return actor
