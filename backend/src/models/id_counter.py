"""
Named sequence counters for human-readable display ids.

One row per id kind (parent, specialist, admin, child). Rows are only ever
advanced with a single increment-and-return statement.
"""

from sqlalchemy import String, Integer
from sqlalchemy.orm import Mapped, mapped_column

from core.database import Base


class IdCounter(Base):
    """Last issued sequence value for one display id kind."""

    __tablename__ = "id_counters"

    name: Mapped[str] = mapped_column(String(50), primary_key=True)
    seq: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<IdCounter(name='{self.name}', seq={self.seq})>"
