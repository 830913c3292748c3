"""
Exercise service: session plans and each child's content library.

Plan creation is one transaction: earlier active plans are deactivated, the
next session index is computed and the new active plan is inserted together
with the child's cached targets. The partial unique index on active plans
turns a racing second creation into a ConflictError instead of a second
active plan.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from core.errors import ConflictError, InternalError, NotFoundError, ValidationError
from models import Actor, Child, Exercise, ExerciseKind, Specialist
from utils.datetime_utils import utc_now
from utils.validators import validate_allowed_days

logger = logging.getLogger(__name__)


MISSING_SESSION_SETTINGS_MESSAGE = "يجب تحديد targetDuration و breakDuration و maxAttempts"

# Minimum accepted value per plan setting
_SETTING_MINIMUMS = {
    "target_duration": 1,
    "break_duration": 0,
    "max_attempts": 1,
}

UPDATABLE_PLAN_FIELDS = (
    "target_duration",
    "break_duration",
    "max_attempts",
    "letters",
    "words",
    "allowed_days",
    "session_name",
    "start_date",
    "end_date",
)


def _validate_settings(values: Dict[str, Any]) -> None:
    for name, minimum in _SETTING_MINIMUMS.items():
        if name in values and values[name] is not None and values[name] < minimum:
            raise ValidationError(f"{name} must be at least {minimum}")
    if "allowed_days" in values:
        try:
            values["allowed_days"] = validate_allowed_days(values["allowed_days"]) or []
        except ValueError as e:
            raise ValidationError(str(e))


def _item_texts(items: Optional[List[Any]], key: str) -> List[str]:
    """Plain strings of plan items, which may be dicts or bare strings."""
    texts = []
    for item in items or []:
        value = item.get(key) if isinstance(item, dict) else item
        text = str(value or "").strip()
        if text:
            texts.append(text)
    return texts


class ExerciseService:
    """
    Service class for exercise plan and content operations.
    """

    # ===== Plans =====

    @staticmethod
    def get_plan(db: Session, exercise_id: int) -> Exercise:
        """A plan by id. The content library is not addressable here."""
        exercise = db.query(Exercise).filter(
            Exercise.id == exercise_id,
            Exercise.kind == ExerciseKind.PLAN.value
        ).first()
        if exercise is None:
            raise NotFoundError("Exercise not found")
        return exercise

    @staticmethod
    def create_plan(db: Session, specialist: Specialist, child: Child, fields: Dict[str, Any]) -> Exercise:
        """
        Create the child's new active plan.

        Args:
            db: Database session
            specialist: Author; authorization is checked by the caller
            child: Target child
            fields: target_duration, break_duration and max_attempts (required),
                    plus letters, words, session_name, start/end dates, allowed_days

        Returns:
            The new plan, active, with session_index one past the child's highest

        Raises:
            ValidationError: A required setting is missing or out of range
            ConflictError: Another plan for the child was activated concurrently
        """
        values = {k: v for k, v in fields.items() if k in UPDATABLE_PLAN_FIELDS}
        if any(values.get(name) is None for name in _SETTING_MINIMUMS):
            raise ValidationError(MISSING_SESSION_SETTINGS_MESSAGE)
        _validate_settings(values)

        try:
            db.query(Exercise).filter(
                Exercise.child_id == child.id,
                Exercise.kind == ExerciseKind.PLAN.value,
                Exercise.active.is_(True)
            ).update({Exercise.active: False, Exercise.updated_at: utc_now()}, synchronize_session="fetch")
            db.flush()

            last_index = db.query(func.max(Exercise.session_index)).filter(
                Exercise.child_id == child.id,
                Exercise.kind == ExerciseKind.PLAN.value
            ).scalar()
            next_index = (last_index or 0) + 1

            plan = Exercise(
                child_id=child.id,
                specialist_id=specialist.id,
                kind=ExerciseKind.PLAN.value,
                session_index=next_index,
                session_name=values.pop("session_name", None) or f"Session {next_index}",
                letters=values.pop("letters", None) or [],
                words=values.pop("words", None) or [],
                allowed_days=values.pop("allowed_days", None) or [],
                active=True,
                **values,
            )
            db.add(plan)

            if fields.get("letters") is not None:
                child.target_letters = _item_texts(fields["letters"], "letter")
            if fields.get("words") is not None:
                child.target_words = _item_texts(fields["words"], "word")

            db.commit()
        except IntegrityError as e:
            db.rollback()
            logger.warning(f"Concurrent plan creation for child {child.id}: {e}")
            raise ConflictError()
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception(f"Failed to create plan for child {child.id}: {e}")
            raise InternalError(str(e))

        db.refresh(plan)
        logger.info(
            f"Specialist {specialist.id} created plan {plan.id} "
            f"(session {plan.session_index}) for child {child.id}"
        )
        return plan

    @staticmethod
    def list_for_child(db: Session, child: Child, include_inactive: bool = False) -> List[Exercise]:
        """Plans of the child, newest first. The content library is not a plan."""
        query = db.query(Exercise).filter(
            Exercise.child_id == child.id,
            Exercise.kind == ExerciseKind.PLAN.value
        )
        if not include_inactive:
            query = query.filter(Exercise.active.is_(True))
        return query.order_by(Exercise.created_at.desc(), Exercise.id.desc()).all()

    @staticmethod
    def active_plan(db: Session, child: Child) -> Optional[Exercise]:
        """The most recent active plan, if any."""
        return db.query(Exercise).filter(
            Exercise.child_id == child.id,
            Exercise.kind == ExerciseKind.PLAN.value,
            Exercise.active.is_(True)
        ).order_by(Exercise.created_at.desc(), Exercise.id.desc()).first()

    @staticmethod
    def update_plan(db: Session, exercise: Exercise, specialist: Specialist, fields: Dict[str, Any]) -> Exercise:
        """
        Apply plan changes made by an authorized specialist.

        The editing specialist becomes the plan's specialist, which normalizes
        plans authored by someone who no longer owns the child.
        """
        values = {k: v for k, v in fields.items() if k in UPDATABLE_PLAN_FIELDS}
        for name in _SETTING_MINIMUMS:
            if name in values and values[name] is None:
                raise ValidationError(MISSING_SESSION_SETTINGS_MESSAGE)
        _validate_settings(values)

        if exercise.specialist_id != specialist.id:
            logger.info(
                f"Plan {exercise.id} ownership normalized from specialist "
                f"{exercise.specialist_id} to {specialist.id}"
            )
            exercise.specialist_id = specialist.id

        for key, value in values.items():
            if key in ("letters", "words", "allowed_days") and value is None:
                value = []
            setattr(exercise, key, value)

        db.commit()
        db.refresh(exercise)
        logger.info(f"Updated exercise {exercise.id}: {sorted(values)}")
        return exercise

    @staticmethod
    def deactivate(db: Session, exercise: Exercise) -> None:
        """Soft delete. The plan stays in the child's history."""
        exercise.active = False
        db.commit()
        logger.info(f"Deactivated exercise {exercise.id}")

    # ===== Content library =====

    @staticmethod
    def find_content(db: Session, child: Child) -> Optional[Exercise]:
        return db.query(Exercise).filter(
            Exercise.child_id == child.id,
            Exercise.kind == ExerciseKind.CONTENT.value
        ).first()

    @staticmethod
    def get_or_create_content(db: Session, child: Child) -> Exercise:
        """
        The child's content record, created empty on first access.

        A concurrent creation loses on the unique index and reads the winner.
        """
        content = ExerciseService.find_content(db, child)
        if content is not None:
            return content

        content = Exercise(
            child_id=child.id,
            kind=ExerciseKind.CONTENT.value,
            content_words=[],
            content_letters=[],
            active=True,
        )
        db.add(content)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            content = ExerciseService.find_content(db, child)
            if content is None:
                raise InternalError("Content record could not be created")
            return content

        db.refresh(content)
        logger.info(f"Created content library {content.id} for child {child.id}")
        return content

    @staticmethod
    def add_content(
        db: Session,
        child: Child,
        author: Actor,
        words: Optional[List[Dict[str, Any]]] = None,
        letters: Optional[List[Dict[str, Any]]] = None
    ) -> Exercise:
        """
        Append words and letters to the child's library.

        Each item needs a non-empty ``text``; ``difficulty`` and ``image`` are optional.
        """
        new_words = [ExerciseService._content_item(item, author) for item in words or []]
        new_letters = [ExerciseService._content_item(item, author) for item in letters or []]
        if not new_words and not new_letters:
            raise ValidationError("Provide at least one word or letter")

        content = ExerciseService.get_or_create_content(db, child)
        # JSON columns only detect reassignment
        content.content_words = list(content.content_words or []) + new_words
        content.content_letters = list(content.content_letters or []) + new_letters
        db.commit()
        db.refresh(content)

        logger.info(
            f"Added {len(new_words)} words and {len(new_letters)} letters "
            f"to content of child {child.id}"
        )
        return content

    @staticmethod
    def _content_item(item: Dict[str, Any], author: Actor) -> Dict[str, Any]:
        text = str(item.get("text") or "").strip()
        if not text:
            raise ValidationError("Content items require text")
        difficulty = item.get("difficulty")
        if difficulty is not None and difficulty not in ("easy", "medium", "hard"):
            raise ValidationError("Difficulty must be easy, medium or hard")
        return {
            "id": uuid.uuid4().hex,
            "text": text,
            "difficulty": difficulty,
            "image": item.get("image"),
            "createdBy": author.id,
            "createdAt": utc_now().isoformat(),
        }
