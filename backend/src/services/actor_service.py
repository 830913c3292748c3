"""
Actor service: the credential store.

Creates parents, specialists and admins in the shared identity namespace,
assigns their immutable staff ids and authenticates them by email/password.
"""

import logging
from typing import Any, Dict, Optional, Type

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.constants import PARENT_ID_PREFIX, SPECIALIST_ID_PREFIX, ADMIN_ID_PREFIX
from core.errors import DuplicateEmailError, ValidationError
from models import Actor, ActorKind, ActorRole, Parent, Specialist, Admin
from services.id_counter_service import next_display_id
from services.password_service import hash_password, verify_password

logger = logging.getLogger(__name__)


# Profile class, display id prefix and counter name per actor kind
_KIND_TABLE: Dict[ActorKind, tuple[Type[Actor], str, str]] = {
    ActorKind.PARENT: (Parent, PARENT_ID_PREFIX, "parentStaffId"),
    ActorKind.SPECIALIST: (Specialist, SPECIALIST_ID_PREFIX, "specialistStaffId"),
    ActorKind.ADMIN: (Admin, ADMIN_ID_PREFIX, "adminStaffId"),
}

_DEFAULT_ROLE: Dict[ActorKind, ActorRole] = {
    ActorKind.PARENT: ActorRole.PARENT,
    ActorKind.SPECIALIST: ActorRole.SPECIALIST,
    ActorKind.ADMIN: ActorRole.ADMIN,
}

_ALLOWED_ROLES: Dict[ActorKind, set[ActorRole]] = {
    ActorKind.PARENT: {ActorRole.PARENT},
    ActorKind.SPECIALIST: {ActorRole.SPECIALIST},
    ActorKind.ADMIN: {ActorRole.ADMIN, ActorRole.SUPERADMIN},
}


def normalize_email(email: str) -> str:
    return email.strip().lower()


class ActorService:
    """Service class for actor identity operations."""

    @staticmethod
    def find_by_email(db: Session, email: str) -> Optional[Actor]:
        """Find an actor of any kind by (case-insensitive) email."""
        return db.query(Actor).filter(Actor.email == normalize_email(email)).first()

    @staticmethod
    def email_in_use(db: Session, email: str, exclude_actor_id: Optional[int] = None) -> bool:
        """Check the shared namespace for an email, optionally ignoring one actor."""
        query = db.query(Actor.id).filter(Actor.email == normalize_email(email))
        if exclude_actor_id is not None:
            query = query.filter(Actor.id != exclude_actor_id)
        return query.first() is not None

    @staticmethod
    def create_actor(
        db: Session,
        kind: ActorKind,
        fields: Dict[str, Any],
        commit: bool = True
    ) -> Actor:
        """
        Create an actor of the given kind.

        Args:
            db: Database session
            kind: Which profile shape to create
            fields: Column values; must include name, email and password.
                    ``role`` defaults to the kind's natural role.
            commit: Commit the transaction (False when the caller adds more
                    writes to the same unit of work)

        Returns:
            The persisted actor with its staff id assigned

        Raises:
            DuplicateEmailError: If any parent, specialist or admin already uses the email
            ValidationError: If the role does not fit the kind
        """
        values = dict(fields)
        password = values.pop("password", None)
        if not password:
            raise ValidationError("Password is required")

        email = normalize_email(values.get("email") or "")
        if not email:
            raise ValidationError("Email is required")
        values["email"] = email

        model, prefix, counter_name = _KIND_TABLE[kind]
        requested_role = values.pop("role", None)
        role = _DEFAULT_ROLE[kind] if requested_role is None else ActorRole.parse(requested_role)
        if role not in _ALLOWED_ROLES[kind]:
            raise ValidationError("Invalid role for this account type")

        if ActorService.email_in_use(db, email):
            raise DuplicateEmailError()

        actor = model(
            **values,
            role=role.value,
            password_hash=hash_password(password),
        )
        actor.staff_id = next_display_id(db, counter_name, prefix, Actor.staff_id)
        db.add(actor)
        try:
            db.flush()
        except IntegrityError:
            # Same email registered concurrently
            db.rollback()
            raise DuplicateEmailError()

        if commit:
            db.commit()
            db.refresh(actor)

        logger.info(f"Created {kind.value} actor {actor.id} ({actor.staff_id})")
        return actor

    @staticmethod
    def authenticate(db: Session, email: str, password: str) -> Optional[Actor]:
        """Return the actor if the email exists and the password matches."""
        actor = ActorService.find_by_email(db, email)
        if actor is None or not verify_password(password, actor.password_hash):
            return None
        return actor

    @staticmethod
    def change_password(db: Session, actor: Actor, current_password: str, new_password: str) -> None:
        """Replace the password after checking the current one."""
        if not verify_password(current_password, actor.password_hash):
            raise ValidationError("Current password is incorrect")
        actor.password_hash = hash_password(new_password)
        db.commit()
        logger.info(f"Password changed for actor {actor.id}")
