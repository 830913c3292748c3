"""
Child service for shared child business logic.

Children are always created under a parent and receive their ``CH-####``
code from the atomic ``childId`` counter in the same transaction as the
insert.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.constants import CHILD_ID_PREFIX, DEFAULT_AVATAR_FEMALE, DEFAULT_AVATAR_MALE
from core.errors import ConflictError, NotFoundError, ValidationError
from models import Child, Parent, Specialist
from services.id_counter_service import next_display_id
from services.link_graph import LinkGraph
from utils.validators import (
    VALID_DIFFICULTY_LEVELS, VALID_REQUEST_STATUSES,
    validate_child_age, validate_choice, validate_gender_field
)

logger = logging.getLogger(__name__)


# Fields a parent or specialist may change after creation
UPDATABLE_FIELDS = (
    "name",
    "age",
    "birth_date",
    "gender",
    "daily_play_duration",
    "target_letters",
    "target_words",
    "difficulty_level",
    "avatar_id",
    "specialist_request_status",
    "active",
)


def default_avatar_for(gender: str) -> str:
    return DEFAULT_AVATAR_FEMALE if gender == "female" else DEFAULT_AVATAR_MALE


def _validate_fields(fields: Dict[str, Any]) -> None:
    try:
        if "age" in fields:
            validate_child_age(fields["age"])
        if "gender" in fields:
            fields["gender"] = validate_gender_field(fields["gender"])
        if "difficulty_level" in fields:
            validate_choice(fields["difficulty_level"], VALID_DIFFICULTY_LEVELS, "Difficulty level")
        if "specialist_request_status" in fields:
            validate_choice(fields["specialist_request_status"], VALID_REQUEST_STATUSES, "Request status")
    except ValueError as e:
        raise ValidationError(str(e))


class ChildService:
    """
    Service class for child operations.
    """

    @staticmethod
    def create_child(db: Session, parent: Optional[Parent], fields: Dict[str, Any]) -> Child:
        """
        Create a child owned by ``parent``.

        Args:
            db: Database session
            parent: Owning parent; required
            fields: name, age, gender and optional profile fields

        Returns:
            The persisted child with its child code assigned

        Raises:
            ValidationError: No parent, or a missing/invalid field
        """
        if parent is None:
            raise ValidationError("A child must belong to a parent")

        values = {k: v for k, v in fields.items() if k in UPDATABLE_FIELDS}
        name = (values.get("name") or "").strip()
        if not name:
            raise ValidationError("Child name is required")
        values["name"] = name
        if values.get("age") is None or values.get("gender") is None:
            raise ValidationError("Age and gender are required")
        _validate_fields(values)

        if not values.get("avatar_id"):
            values["avatar_id"] = default_avatar_for(values["gender"])
        values.setdefault("active", True)
        values.setdefault("specialist_request_status", "none")

        child = Child(parent_id=parent.id, **values)
        child.child_code = next_display_id(db, "childId", CHILD_ID_PREFIX, Child.child_code)
        db.add(child)
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            logger.error(f"Failed to create child for parent {parent.id}: {e}")
            raise ConflictError()
        db.refresh(child)

        logger.info(f"Created child {child.id} ({child.child_code}) for parent {parent.id}")
        return child

    @staticmethod
    def get_child(db: Session, child_id: int) -> Child:
        """
        Raises:
            NotFoundError: Unknown child id
        """
        child = db.query(Child).filter(Child.id == child_id).first()
        if child is None:
            raise NotFoundError("Child not found")
        return child

    @staticmethod
    def list_for_parent(db: Session, parent: Parent) -> List[Child]:
        return db.query(Child).filter(Child.parent_id == parent.id).order_by(Child.id).all()

    @staticmethod
    def list_for_specialist(db: Session, specialist: Specialist) -> List[Child]:
        return LinkGraph.children_of_specialist(db, specialist)

    @staticmethod
    def update_child(db: Session, child: Child, fields: Dict[str, Any]) -> Child:
        """
        Apply profile changes.

        Ownership, assignment and the child code are not editable here.
        """
        values = {k: v for k, v in fields.items() if k in UPDATABLE_FIELDS}
        if "name" in values:
            values["name"] = (values["name"] or "").strip()
            if not values["name"]:
                raise ValidationError("Child name is required")
        for key in ("age", "gender", "active"):
            if key in values and values[key] is None:
                raise ValidationError(f"{key} cannot be empty")
        _validate_fields(values)

        for key, value in values.items():
            setattr(child, key, value)
        db.commit()
        db.refresh(child)

        logger.info(f"Updated child {child.id}: {sorted(values)}")
        return child
