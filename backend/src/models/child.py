"""
Child model representing the child who plays the therapy sessions.

Every child is owned by exactly one parent and may be assigned to one
specialist. The ``child_code`` (``CH-0001``) is issued from the ``childId``
counter at creation and never changes.
"""

from datetime import date, datetime
from typing import List, Optional

from sqlalchemy import String, TIMESTAMP, Date, ForeignKey, Integer, JSON, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from core.database import Base
from core.constants import MAX_STRING_LENGTH


class Child(Base):
    """A child enrolled by a parent."""

    __tablename__ = "children"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    name: Mapped[str] = mapped_column(String(MAX_STRING_LENGTH))
    age: Mapped[int] = mapped_column(Integer)
    birth_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    gender: Mapped[str] = mapped_column(String(10))
    """'male' or 'female'."""

    parent_id: Mapped[int] = mapped_column(ForeignKey("parents.id", ondelete="CASCADE"), nullable=False)
    """Owning parent. Required."""

    assigned_specialist_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("specialists.id", ondelete="SET NULL"), nullable=True
    )
    """Weak reference to the specialist the child is assigned to."""

    specialist_request_status: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    """'none', 'pending', 'approved' or 'rejected'."""

    daily_play_duration: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    target_letters: Mapped[List[str]] = mapped_column(JSON, default=list)
    """Letters of the active plan, cached for quick display."""

    target_words: Mapped[List[str]] = mapped_column(JSON, default=list)
    """Words of the active plan, cached for quick display."""

    difficulty_level: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    child_code: Mapped[Optional[str]] = mapped_column(String(20), unique=True, nullable=True)
    """Display id (CH-####), immutable once assigned."""

    avatar_id: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    active: Mapped[bool] = mapped_column(default=True)

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)

    parent = relationship("Parent", back_populates="assigned_children", foreign_keys=[parent_id])

    __table_args__ = (
        Index('idx_children_parent', 'parent_id'),
        Index('idx_children_assigned_specialist', 'assigned_specialist_id'),
    )

    @validates("parent_id")
    def _require_parent(self, key: str, value: Optional[int]) -> int:
        if value is None:
            raise ValueError("A child must belong to a parent")
        return value

    @validates("child_code")
    def _freeze_child_code(self, key: str, value: Optional[str]) -> Optional[str]:
        if self.child_code is not None and value != self.child_code:
            raise ValueError("child_code cannot be changed once assigned")
        return value

    def __repr__(self) -> str:
        return f"<Child(id={self.id}, code='{self.child_code}', parent_id={self.parent_id})>"
