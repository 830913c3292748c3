"""
Exercise model: session plans and the per-child content library.

Two kinds of rows share this table:

- ``plan``: a session configuration authored by a specialist. Plans form an
  append-only history per child; older plans are deactivated, never deleted.
  At most one plan per child is active.
- ``content``: the child's word/letter library. At most one per child.

Both "at most one" rules are partial unique indexes, so the store itself
rejects a second active plan or a second content row.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from sqlalchemy import String, TIMESTAMP, ForeignKey, Integer, JSON, Index, text
from sqlalchemy.orm import Mapped, mapped_column

from core.database import Base
from core.constants import MAX_STRING_LENGTH


class ExerciseKind(str, Enum):
    PLAN = "plan"
    CONTENT = "content"


class Exercise(Base):
    """Plan or content record attached to one child."""

    __tablename__ = "exercises"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    child_id: Mapped[int] = mapped_column(ForeignKey("children.id", ondelete="CASCADE"), nullable=False)
    kind: Mapped[str] = mapped_column(String(10), nullable=False)

    specialist_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("specialists.id", ondelete="SET NULL"), nullable=True
    )
    """Author of the plan. Normalized to the last specialist who edited it."""

    # Content library (kind == 'content')
    content_words: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, default=list)
    content_letters: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, default=list)

    # Plan targets (kind == 'plan')
    letters: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, default=list)
    words: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, default=list)

    session_index: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    """Per-child sequence number of the plan (1, 2, ...)."""

    session_name: Mapped[Optional[str]] = mapped_column(String(MAX_STRING_LENGTH), nullable=True)

    target_duration: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    """Minutes of play per session. Required for plans (>= 1)."""

    break_duration: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    """Minutes of break. Required for plans (>= 0)."""

    max_attempts: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    """Attempts per item. Required for plans (>= 1)."""

    start_date: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    end_date: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)

    allowed_days: Mapped[List[int]] = mapped_column(JSON, default=list)
    """Weekdays the plan may be played (0=Sunday ... 6=Saturday)."""

    active: Mapped[bool] = mapped_column(nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)

    __table_args__ = (
        Index('idx_exercises_child_kind', 'child_id', 'kind'),
        Index(
            'uq_exercises_content_per_child', 'child_id', unique=True,
            postgresql_where=text("kind = 'content'"),
            sqlite_where=text("kind = 'content'"),
        ),
        Index(
            'uq_exercises_active_plan_per_child', 'child_id', unique=True,
            postgresql_where=text("kind = 'plan' AND active"),
            sqlite_where=text("kind = 'plan' AND active = 1"),
        ),
    )

    def __repr__(self) -> str:
        return f"<Exercise(id={self.id}, child_id={self.child_id}, kind='{self.kind}', active={self.active})>"
