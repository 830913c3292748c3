"""
Center model representing a speech therapy center.

A center groups specialists and is administered by exactly one admin. Its
specialist list is derived from Specialist.center_id, so membership and the
specialist's center pointer can never disagree.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import String, TIMESTAMP, Text, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from core.database import Base
from core.constants import MAX_STRING_LENGTH


class Center(Base):
    """Speech therapy center."""

    __tablename__ = "centers"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    name: Mapped[str] = mapped_column(String(MAX_STRING_LENGTH))
    """Display name (Arabic)."""

    name_en: Mapped[Optional[str]] = mapped_column(String(MAX_STRING_LENGTH), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(String(MAX_STRING_LENGTH), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(MAX_STRING_LENGTH), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(default=True)

    admin_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("admins.id", ondelete="SET NULL"), nullable=True, unique=True
    )
    """The admin who owns this center. An admin administers at most one center."""

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<Center(id={self.id}, name='{self.name}', admin_id={self.admin_id})>"
