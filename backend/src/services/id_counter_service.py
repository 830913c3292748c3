"""
Display id generation backed by atomic counters.

Every display id kind (``PT``, ``SP``, ``AD``, ``CH``) draws from its own row
in ``id_counters``. The only write ever applied to a counter is a single
``UPDATE ... SET seq = seq + 1 ... RETURNING seq`` statement, so concurrent
creations never receive the same value. A missing counter is bootstrapped
from the highest display id already stored for that kind.
"""

import logging
from typing import Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, InstrumentedAttribute

from core.constants import DISPLAY_ID_PAD_WIDTH
from models import IdCounter

logger = logging.getLogger(__name__)


def format_display_id(prefix: str, seq: int) -> str:
    """Format a sequence value as ``PREFIX-0001``."""
    return f"{prefix}-{str(seq).zfill(DISPLAY_ID_PAD_WIDTH)}"


def parse_display_id(prefix: str, value: Optional[str]) -> Optional[int]:
    """Return the numeric part of ``PREFIX-####``, or None if it does not match."""
    if not value or not value.startswith(f"{prefix}-"):
        return None
    digits = value[len(prefix) + 1:]
    if not digits.isdigit():
        return None
    return int(digits)


def _highest_existing(db: Session, prefix: str, column: InstrumentedAttribute) -> int:
    values = db.query(column).filter(column.like(f"{prefix}-%")).all()
    parsed = [parse_display_id(prefix, row[0]) for row in values]
    return max((p for p in parsed if p is not None), default=0)


def _increment(db: Session, name: str) -> Optional[int]:
    stmt = (
        update(IdCounter)
        .where(IdCounter.name == name)
        .values(seq=IdCounter.seq + 1)
        .returning(IdCounter.seq)
        .execution_options(synchronize_session=False)
    )
    return db.execute(stmt).scalar_one_or_none()


def next_sequence(db: Session, name: str, prefix: str, column: InstrumentedAttribute) -> int:
    """
    Advance the named counter and return the new value.

    Args:
        db: Database session (the increment joins the caller's transaction)
        name: Counter name, e.g. "childId"
        prefix: Display id prefix used to bootstrap the counter
        column: Column holding existing display ids of this kind

    Returns:
        The next sequence value, strictly greater than any issued before
    """
    seq = _increment(db, name)
    if seq is not None:
        return seq

    start = _highest_existing(db, prefix, column)
    try:
        with db.begin_nested():
            db.add(IdCounter(name=name, seq=start))
        logger.info(f"Bootstrapped id counter '{name}' at {start}")
    except IntegrityError:
        # Another request created the counter first; its row is authoritative
        logger.info(f"Id counter '{name}' created concurrently")

    seq = _increment(db, name)
    if seq is None:
        raise RuntimeError(f"Id counter '{name}' could not be initialized")
    return seq


def next_display_id(db: Session, name: str, prefix: str, column: InstrumentedAttribute) -> str:
    """Advance the named counter and return the formatted display id."""
    return format_display_id(prefix, next_sequence(db, name, prefix, column))
