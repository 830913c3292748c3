# pyright: reportMissingTypeStubs=false
"""
Exercise API endpoints.

Specialists author session plans for children they reach through the link
graph; parents and specialists read them. Default letters and words are
public reference data.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import field_validator
from sqlalchemy.orm import Session

from api.responses import CamelModel, ExerciseResponse, SuccessResponse
from auth.dependencies import (
    ActorContext, require_parent_or_specialist, require_specialist
)
from auth.permissions import (
    ensure_can_manage_exercise, ensure_can_modify_child, ensure_can_read_child
)
from core.database import get_db
from core.reference_data import DEFAULT_LETTERS, DEFAULT_WORDS
from services import ChildService, ExerciseService
from utils.validators import validate_allowed_days

logger = logging.getLogger(__name__)

router = APIRouter()


class PlanCreateRequest(CamelModel):
    """
    Request model for a new session plan.

    The three session settings have no defaults; the service rejects a plan
    missing any of them.
    """
    child_id: int
    target_duration: Optional[int] = None
    break_duration: Optional[int] = None
    max_attempts: Optional[int] = None
    letters: Optional[List[Dict[str, Any]]] = None
    words: Optional[List[Dict[str, Any]]] = None
    session_name: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    allowed_days: Optional[List[int]] = None

    @field_validator('allowed_days')
    @classmethod
    def validate_days(cls, v: Optional[List[int]]) -> Optional[List[int]]:
        return validate_allowed_days(v)


class PlanUpdateRequest(CamelModel):
    target_duration: Optional[int] = None
    break_duration: Optional[int] = None
    max_attempts: Optional[int] = None
    letters: Optional[List[Dict[str, Any]]] = None
    words: Optional[List[Dict[str, Any]]] = None
    session_name: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    allowed_days: Optional[List[int]] = None


class ContentItem(CamelModel):
    text: str
    difficulty: Optional[str] = None
    image: Optional[str] = None


class ContentAddRequest(CamelModel):
    words: Optional[List[ContentItem]] = None
    letters: Optional[List[ContentItem]] = None


class ExerciseEnvelope(CamelModel):
    success: bool = True
    exercise: Optional[ExerciseResponse] = None


class ExerciseListResponse(CamelModel):
    success: bool = True
    count: int
    exercises: List[ExerciseResponse]


class ContentEnvelope(CamelModel):
    success: bool = True
    content: ExerciseResponse


class DefaultLettersResponse(CamelModel):
    success: bool = True
    letters: List[Dict[str, Any]]


class DefaultWordsResponse(CamelModel):
    success: bool = True
    words: List[Dict[str, Any]]


# ===== Plans =====

@router.post("", summary="Create a session plan", status_code=status.HTTP_201_CREATED)
async def create_plan(
    request: PlanCreateRequest,
    ctx: ActorContext = Depends(require_specialist),
    db: Session = Depends(get_db)
) -> ExerciseEnvelope:
    """
    Create the child's new active plan. Earlier active plans are deactivated.

    The specialist must have the child assigned or be linked to its parent.
    """
    child = ChildService.get_child(db, request.child_id)
    ensure_can_modify_child(db, ctx, child)

    fields = request.model_dump(exclude={"child_id"})
    plan = ExerciseService.create_plan(db, ctx.actor, child, fields)  # type: ignore[arg-type]
    return ExerciseEnvelope(exercise=ExerciseResponse.model_validate(plan))


@router.get("/child/{child_id}", summary="List a child's exercises")
async def list_child_exercises(
    child_id: int,
    include_inactive: bool = Query(False, alias="includeInactive"),
    ctx: ActorContext = Depends(require_parent_or_specialist),
    db: Session = Depends(get_db)
) -> ExerciseListResponse:
    """Newest first. Inactive plans are included only on request."""
    child = ChildService.get_child(db, child_id)
    ensure_can_read_child(db, ctx, child)

    exercises = ExerciseService.list_for_child(db, child, include_inactive=include_inactive)
    return ExerciseListResponse(
        count=len(exercises),
        exercises=[ExerciseResponse.model_validate(e) for e in exercises],
    )


@router.get("/child/{child_id}/active", summary="Get a child's active plan")
async def get_active_plan(
    child_id: int,
    ctx: ActorContext = Depends(require_parent_or_specialist),
    db: Session = Depends(get_db)
) -> ExerciseEnvelope:
    """The most recent active plan, or ``exercise: null`` when there is none."""
    child = ChildService.get_child(db, child_id)
    ensure_can_read_child(db, ctx, child)

    plan = ExerciseService.active_plan(db, child)
    return ExerciseEnvelope(exercise=ExerciseResponse.model_validate(plan) if plan else None)


@router.put("/{exercise_id}", summary="Update a session plan")
async def update_plan(
    exercise_id: int,
    request: PlanUpdateRequest,
    ctx: ActorContext = Depends(require_specialist),
    db: Session = Depends(get_db)
) -> ExerciseEnvelope:
    exercise = ExerciseService.get_plan(db, exercise_id)
    child = ChildService.get_child(db, exercise.child_id)
    ensure_can_manage_exercise(db, ctx, exercise, child)

    exercise = ExerciseService.update_plan(
        db, exercise, ctx.actor, request.model_dump(exclude_unset=True)  # type: ignore[arg-type]
    )
    return ExerciseEnvelope(exercise=ExerciseResponse.model_validate(exercise))


@router.delete("/{exercise_id}", summary="Deactivate a session plan")
async def deactivate_plan(
    exercise_id: int,
    ctx: ActorContext = Depends(require_specialist),
    db: Session = Depends(get_db)
) -> SuccessResponse:
    """Soft delete: the plan is kept as inactive history."""
    exercise = ExerciseService.get_plan(db, exercise_id)
    child = ChildService.get_child(db, exercise.child_id)
    ensure_can_manage_exercise(db, ctx, exercise, child)

    ExerciseService.deactivate(db, exercise)
    return SuccessResponse(message="Exercise deactivated")


# ===== Content library =====

@router.get("/child/{child_id}/content", summary="Get a child's content library")
async def get_content(
    child_id: int,
    ctx: ActorContext = Depends(require_parent_or_specialist),
    db: Session = Depends(get_db)
) -> ContentEnvelope:
    child = ChildService.get_child(db, child_id)
    ensure_can_read_child(db, ctx, child)

    content = ExerciseService.get_or_create_content(db, child)
    return ContentEnvelope(content=ExerciseResponse.model_validate(content))


@router.post("/child/{child_id}/content", summary="Add words or letters to a child's library")
async def add_content(
    child_id: int,
    request: ContentAddRequest,
    ctx: ActorContext = Depends(require_parent_or_specialist),
    db: Session = Depends(get_db)
) -> ContentEnvelope:
    child = ChildService.get_child(db, child_id)
    ensure_can_modify_child(db, ctx, child)

    content = ExerciseService.add_content(
        db,
        child,
        ctx.actor,
        words=[item.model_dump() for item in request.words or []],
        letters=[item.model_dump() for item in request.letters or []],
    )
    return ContentEnvelope(content=ExerciseResponse.model_validate(content))


# ===== Reference data =====

@router.get("/letters/default", summary="Default Arabic letters")
async def get_default_letters() -> DefaultLettersResponse:
    return DefaultLettersResponse(letters=DEFAULT_LETTERS)


@router.get("/words/default", summary="Default dialect words")
async def get_default_words() -> DefaultWordsResponse:
    return DefaultWordsResponse(words=DEFAULT_WORDS)
