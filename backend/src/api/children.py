# pyright: reportMissingTypeStubs=false
"""
Children API endpoints.

Parents create and manage their own children; specialists reach children
through assignment or linked parents; center admins may read children their
center reaches.
"""

import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import field_validator
from sqlalchemy.orm import Session

from api.responses import (
    ActorSummary, CamelModel, ChildDetailResponse, ChildResponse, SpecialistSummary
)
from auth.dependencies import (
    ActorContext, get_current_actor, require_email_verified, require_parent,
    require_parent_or_specialist
)
from auth.permissions import ensure_can_modify_child, ensure_can_read_child
from core.database import get_db
from core.errors import AuthorizationError
from models import ActorRole, Child, Specialist
from services import ChildService
from utils.validators import validate_child_age, validate_gender_field

logger = logging.getLogger(__name__)

router = APIRouter()


class ChildCreateRequest(CamelModel):
    """Request model for creating a child. The parent is always the caller."""
    name: str
    age: int
    gender: str
    birth_date: Optional[date] = None
    daily_play_duration: Optional[int] = None
    difficulty_level: Optional[str] = None
    avatar_id: Optional[str] = None
    target_letters: Optional[List[str]] = None
    target_words: Optional[List[str]] = None

    @field_validator('age')
    @classmethod
    def validate_age(cls, v: int) -> int:
        return validate_child_age(v)

    @field_validator('gender')
    @classmethod
    def validate_gender(cls, v: str) -> str:
        return validate_gender_field(v)


class ChildUpdateRequest(CamelModel):
    name: Optional[str] = None
    age: Optional[int] = None
    gender: Optional[str] = None
    birth_date: Optional[date] = None
    daily_play_duration: Optional[int] = None
    difficulty_level: Optional[str] = None
    avatar_id: Optional[str] = None
    target_letters: Optional[List[str]] = None
    target_words: Optional[List[str]] = None
    specialist_request_status: Optional[str] = None
    active: Optional[bool] = None


class ChildEnvelope(CamelModel):
    success: bool = True
    child: ChildDetailResponse


class ChildListResponse(CamelModel):
    success: bool = True
    count: int
    children: List[ChildResponse]


def _detail(db: Session, child: Child) -> ChildDetailResponse:
    detail = ChildDetailResponse.model_validate(child)
    if child.parent is not None:
        detail.parent = ActorSummary.model_validate(child.parent)
    if child.assigned_specialist_id is not None:
        specialist = db.query(Specialist).filter(Specialist.id == child.assigned_specialist_id).first()
        if specialist is not None:
            detail.assigned_specialist = SpecialistSummary.model_validate(specialist)
    return detail


@router.post("", summary="Create a child", status_code=status.HTTP_201_CREATED)
async def create_child(
    request: ChildCreateRequest,
    ctx: ActorContext = Depends(require_parent),
    _verified: ActorContext = Depends(require_email_verified),
    db: Session = Depends(get_db)
) -> ChildEnvelope:
    """Create a child owned by the calling parent. Requires a verified email."""
    fields = request.model_dump(exclude_unset=True)
    child = ChildService.create_child(db, ctx.actor, fields)  # type: ignore[arg-type]
    return ChildEnvelope(child=_detail(db, child))


@router.get("", summary="List children visible to the caller")
async def list_children(
    ctx: ActorContext = Depends(require_parent_or_specialist),
    db: Session = Depends(get_db)
) -> ChildListResponse:
    match ctx.role:
        case ActorRole.PARENT:
            children = ChildService.list_for_parent(db, ctx.actor)  # type: ignore[arg-type]
        case ActorRole.SPECIALIST:
            children = ChildService.list_for_specialist(db, ctx.actor)  # type: ignore[arg-type]
        case _:
            raise AuthorizationError()

    return ChildListResponse(
        count=len(children),
        children=[ChildResponse.model_validate(c) for c in children],
    )


@router.get("/{child_id}", summary="Get a child")
async def get_child(
    child_id: int,
    ctx: ActorContext = Depends(get_current_actor),
    db: Session = Depends(get_db)
) -> ChildEnvelope:
    child = ChildService.get_child(db, child_id)
    ensure_can_read_child(db, ctx, child)
    return ChildEnvelope(child=_detail(db, child))


@router.put("/{child_id}", summary="Update a child")
async def update_child(
    child_id: int,
    request: ChildUpdateRequest,
    ctx: ActorContext = Depends(require_parent_or_specialist),
    db: Session = Depends(get_db)
) -> ChildEnvelope:
    """Owner parent, or a specialist the child is assigned or linked to."""
    child = ChildService.get_child(db, child_id)
    ensure_can_modify_child(db, ctx, child)

    child = ChildService.update_child(db, child, request.model_dump(exclude_unset=True))
    return ChildEnvelope(child=_detail(db, child))
