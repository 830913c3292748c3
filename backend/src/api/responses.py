"""
Shared response models for API endpoints.

Wire names are lowerCamelCase; models read straight from ORM objects and
also accept snake_case input. Every response carries ``success``.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model with camelCase aliases."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class SuccessResponse(CamelModel):
    """Response model for operations that only report an outcome."""
    success: bool = True
    message: Optional[str] = None


# ===== Actors =====

class ActorResponse(CamelModel):
    """Any actor. Kind-specific fields are null where they do not apply."""
    id: int
    name: str
    email: str
    role: str
    phone: Optional[str] = None
    bio: Optional[str] = None
    profile_photo: Optional[str] = None
    email_verified: bool = False
    staff_id: Optional[str] = None
    linked_specialist_id: Optional[int] = None  # Parents
    center_id: Optional[int] = None  # Specialists and admins
    specialization: Optional[str] = None  # Specialists
    license_number: Optional[str] = None  # Specialists
    created_at: Optional[datetime] = None


class ActorSummary(CamelModel):
    """Short actor reference embedded in other payloads."""
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    profile_photo: Optional[str] = None
    staff_id: Optional[str] = None


class SpecialistSummary(ActorSummary):
    specialization: Optional[str] = None
    created_at: Optional[datetime] = None


class ParentSummary(ActorSummary):
    linked_specialist_id: Optional[int] = None


# ===== Centers =====

class CenterResponse(CamelModel):
    id: int
    name: str
    name_en: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    description: Optional[str] = None
    is_active: bool = True
    admin_id: Optional[int] = None
    created_at: Optional[datetime] = None


# ===== Children =====

class ChildResponse(CamelModel):
    id: int
    name: str
    age: int
    birth_date: Optional[date] = None
    gender: str
    parent_id: int
    assigned_specialist_id: Optional[int] = None
    specialist_request_status: Optional[str] = None
    daily_play_duration: Optional[int] = None
    target_letters: List[str] = []
    target_words: List[str] = []
    difficulty_level: Optional[str] = None
    child_code: Optional[str] = None
    avatar_id: Optional[str] = None
    active: bool = True
    created_at: Optional[datetime] = None


class ChildDetailResponse(ChildResponse):
    """Child with its parent and assigned specialist expanded."""
    parent: Optional[ActorSummary] = None
    assigned_specialist: Optional[SpecialistSummary] = None


# ===== Exercises =====

class ExerciseResponse(CamelModel):
    id: int
    child_id: int
    kind: str
    specialist_id: Optional[int] = None
    content_words: List[Dict[str, Any]] = []
    content_letters: List[Dict[str, Any]] = []
    letters: List[Dict[str, Any]] = []
    words: List[Dict[str, Any]] = []
    session_index: Optional[int] = None
    session_name: Optional[str] = None
    target_duration: Optional[int] = None
    break_duration: Optional[int] = None
    max_attempts: Optional[int] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    allowed_days: List[int] = []
    active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
