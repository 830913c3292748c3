"""
Actor models: the authenticated identities of the platform.

All actors share one identity table (``actors``) so that email addresses form a
single namespace and a token id resolves to exactly one identity. The three
profile shapes - parents, specialists and center admins - are mapped with
joined-table inheritance, each adding its own relationship fields.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import String, TIMESTAMP, ForeignKey, Integer, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from core.database import Base
from core.constants import MAX_STRING_LENGTH, MAX_BIO_LENGTH


class ActorRole(str, Enum):
    """Closed set of roles carried in tokens and stored on actors."""
    PARENT = "parent"
    SPECIALIST = "specialist"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["ActorRole"]:
        """Return the matching role, or None for missing/unknown values."""
        try:
            return cls(value)
        except ValueError:
            return None


class ActorKind(str, Enum):
    """Storage partition (profile shape) of an actor."""
    PARENT = "parent"
    SPECIALIST = "specialist"
    ADMIN = "admin"


class Actor(Base):
    """
    Shared identity record for every parent, specialist and admin.

    Holds the credential (bcrypt hash), role tag, verification state and the
    human-readable staff id (``PT-0001``/``SP-0001``/``AD-0001``) which is
    assigned once at creation and never changes afterwards.
    """

    __tablename__ = "actors"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    kind: Mapped[str] = mapped_column(String(20), nullable=False)
    """Profile partition: 'parent', 'specialist' or 'admin'."""

    name: Mapped[str] = mapped_column(String(MAX_STRING_LENGTH))

    email: Mapped[str] = mapped_column(String(MAX_STRING_LENGTH), unique=True)
    """Always stored lower-cased; unique across all actor kinds."""

    password_hash: Mapped[str] = mapped_column(String(255))

    role: Mapped[str] = mapped_column(String(20), nullable=False)
    """One of ActorRole. Admin profiles may be 'admin' or 'superadmin'."""

    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    bio: Mapped[Optional[str]] = mapped_column(String(MAX_BIO_LENGTH), nullable=True)
    profile_photo: Mapped[Optional[str]] = mapped_column(String(MAX_STRING_LENGTH), nullable=True)

    email_verified: Mapped[bool] = mapped_column(default=False)

    verification_code_hash: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    """SHA-256 hex digest of the outstanding email verification code."""

    reset_code_hash: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    """SHA-256 hex digest of the outstanding password reset code."""

    reset_code_expires_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)

    staff_id: Mapped[Optional[str]] = mapped_column(String(20), unique=True, nullable=True)
    """Human-readable display id, immutable once assigned."""

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)

    __mapper_args__ = {
        "polymorphic_on": "kind",
        "polymorphic_identity": "actor",
    }

    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        return value.strip().lower()

    @validates("staff_id")
    def _freeze_staff_id(self, key: str, value: Optional[str]) -> Optional[str]:
        if self.staff_id is not None and value != self.staff_id:
            raise ValueError("staff_id cannot be changed once assigned")
        return value

    @property
    def actor_role(self) -> Optional[ActorRole]:
        return ActorRole.parse(self.role)

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(id={self.id}, email='{self.email}', role='{self.role}')>"


class Parent(Actor):
    """
    Parent profile. Owns children and may be linked to one specialist.

    ``linked_specialist_id`` mirrors membership in the specialist's linked
    parents (see SpecialistParentLink); both sides are written together.
    """

    __tablename__ = "parents"

    id: Mapped[int] = mapped_column(ForeignKey("actors.id", ondelete="CASCADE"), primary_key=True)

    linked_specialist_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("specialists.id", ondelete="SET NULL"), nullable=True, index=True
    )
    """Weak reference to the specialist this parent is linked to."""

    assigned_children = relationship(
        "Child",
        back_populates="parent",
        foreign_keys="Child.parent_id",
        order_by="Child.id",
    )
    """Children owned by this parent (inverse of Child.parent_id)."""

    __mapper_args__ = {"polymorphic_identity": ActorKind.PARENT.value}


class Specialist(Actor):
    """Speech therapy specialist, optionally belonging to one center."""

    __tablename__ = "specialists"

    id: Mapped[int] = mapped_column(ForeignKey("actors.id", ondelete="CASCADE"), primary_key=True)

    center_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("centers.id", ondelete="SET NULL"), nullable=True, index=True
    )
    """Center membership; Center.specialists is derived from this column."""

    specialization: Mapped[Optional[str]] = mapped_column(String(MAX_STRING_LENGTH), nullable=True)
    license_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    created_by_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    """Admin who created this account, if it was not self-registered."""

    __mapper_args__ = {"polymorphic_identity": ActorKind.SPECIALIST.value}


class Admin(Actor):
    """Center administrator ('admin') or platform superadmin ('superadmin')."""

    __tablename__ = "admins"

    id: Mapped[int] = mapped_column(ForeignKey("actors.id", ondelete="CASCADE"), primary_key=True)

    center_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, index=True)
    """
    Weak pointer to the administered center.

    Not a foreign key. It may point at a center whose admin is someone else
    (or at nothing); center scoping treats that as no access.
    """

    __mapper_args__ = {"polymorphic_identity": ActorKind.ADMIN.value}

    def is_superadmin(self) -> bool:
        return self.role == ActorRole.SUPERADMIN.value


class SpecialistParentLink(Base):
    """
    Membership of a parent in a specialist's linked parents.

    The composite primary key gives set semantics: linking twice is a no-op.
    """

    __tablename__ = "specialist_parent_links"

    specialist_id: Mapped[int] = mapped_column(ForeignKey("specialists.id", ondelete="CASCADE"), primary_key=True)
    parent_id: Mapped[int] = mapped_column(ForeignKey("parents.id", ondelete="CASCADE"), primary_key=True)

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)

    __table_args__ = (
        Index('idx_specialist_parent_links_parent', 'parent_id'),
    )
