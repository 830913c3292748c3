# pyright: reportMissingTypeStubs=false
"""
Authentication API endpoints.

Handles registration, email/password login, the current actor's profile,
password changes and resets, email verification and token refresh.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import field_validator
from sqlalchemy.orm import Session

from api.responses import ActorResponse, CamelModel, CenterResponse, ChildResponse, SuccessResponse
from auth.dependencies import ActorContext, get_current_actor, require_parent
from core.database import get_db
from core.errors import (
    AuthenticationError, DuplicateEmailError, InternalError, NotFoundError, ValidationError
)
from models import ActorKind, ActorRole, Admin, Center, Parent, Specialist
from services import ActorService, ChildService, VerificationService
from services.jwt_service import jwt_service
from utils.validators import validate_password

logger = logging.getLogger(__name__)

router = APIRouter()


FORGOT_PASSWORD_MESSAGE = "If an account with that email exists, a password reset code has been sent"


# ===== Request / response models =====

class RegisterRequest(CamelModel):
    """Self-registration. Only parents and specialists may register."""
    name: str
    email: str
    password: str
    role: str
    phone: Optional[str] = None
    specialization: Optional[str] = None
    license_number: Optional[str] = None

    @field_validator('name', 'email')
    @classmethod
    def validate_required_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError('This field is required')
        return v

    @field_validator('password')
    @classmethod
    def validate_new_password(cls, v: str) -> str:
        return validate_password(v)


class LoginRequest(CamelModel):
    # Optional so a missing field gets the login-specific message
    email: Optional[str] = None
    password: Optional[str] = None


class ProfileUpdateRequest(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    bio: Optional[str] = None
    profile_photo: Optional[str] = None


class ChangePasswordRequest(CamelModel):
    current_password: Optional[str] = None
    new_password: Optional[str] = None


class EmailRequest(CamelModel):
    email: Optional[str] = None


class CodeRequest(CamelModel):
    token: Optional[str] = None


class ResetPasswordRequest(CamelModel):
    token: Optional[str] = None
    new_password: Optional[str] = None


class AuthResponse(CamelModel):
    success: bool = True
    token: str
    user: ActorResponse


class UserResponse(CamelModel):
    success: bool = True
    user: ActorResponse
    center: Optional[CenterResponse] = None
    children: Optional[list[ChildResponse]] = None


class TokenResponse(CamelModel):
    success: bool = True
    token: str


class MySpecialistResponse(CamelModel):
    success: bool = True
    specialist: ActorResponse
    center: Optional[CenterResponse] = None


def _checked_new_password(value: Optional[str]) -> str:
    try:
        return validate_password(value or "")
    except ValueError as e:
        raise ValidationError(str(e))


# ===== Endpoints =====

@router.post("/register", summary="Register a parent or specialist", status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    db: Session = Depends(get_db)
) -> AuthResponse:
    """
    Create a parent or specialist account and email a verification code.

    The email must be unused by every parent, specialist and admin.
    """
    role = ActorRole.parse(request.role)
    match role:
        case ActorRole.PARENT:
            kind = ActorKind.PARENT
            fields = {"name": request.name, "email": request.email, "phone": request.phone}
        case ActorRole.SPECIALIST:
            kind = ActorKind.SPECIALIST
            fields = {
                "name": request.name,
                "email": request.email,
                "phone": request.phone,
                "specialization": request.specialization,
                "license_number": request.license_number,
            }
        case _:
            raise ValidationError("Invalid role for registration")

    fields["password"] = request.password
    fields["role"] = role.value

    try:
        actor = ActorService.create_actor(db, kind, fields)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Registration failed for {request.email}: {e}")
        raise InternalError(str(e))

    # Delivery failure keeps the account; the code can be re-sent
    VerificationService.send_verification(db, actor, raise_on_failure=False)

    token = jwt_service.issue_token(actor.id, actor.role)
    return AuthResponse(token=token, user=ActorResponse.model_validate(actor))


@router.post("/login", summary="Log in with email and password")
async def login(
    request: LoginRequest,
    db: Session = Depends(get_db)
) -> AuthResponse:
    """Authenticate against the shared identity namespace and issue a token."""
    if not request.email or not request.password:
        raise ValidationError("Please provide email and password")

    actor = ActorService.authenticate(db, request.email, request.password)
    if actor is None:
        logger.info("Failed login attempt")
        raise AuthenticationError("Invalid credentials")

    token = jwt_service.issue_token(actor.id, actor.role)
    logger.info(f"Actor {actor.id} logged in as {actor.role}")
    return AuthResponse(token=token, user=ActorResponse.model_validate(actor))


@router.get("/me", summary="Get the current actor")
async def get_me(
    ctx: ActorContext = Depends(get_current_actor),
    db: Session = Depends(get_db)
) -> UserResponse:
    """
    Current actor with role-specific context: a parent's children, or the
    center of a specialist or admin.
    """
    actor = ctx.actor
    response = UserResponse(user=ActorResponse.model_validate(actor))

    if isinstance(actor, Parent):
        response.children = [ChildResponse.model_validate(c) for c in ChildService.list_for_parent(db, actor)]
    elif isinstance(actor, (Specialist, Admin)) and actor.center_id is not None:
        center = db.query(Center).filter(Center.id == actor.center_id).first()
        if center is not None:
            response.center = CenterResponse.model_validate(center)

    return response


@router.put("/profile", summary="Update the current actor's profile")
async def update_profile(
    request: ProfileUpdateRequest,
    ctx: ActorContext = Depends(get_current_actor),
    db: Session = Depends(get_db)
) -> UserResponse:
    """
    Update name, email, phone, bio or photo of the caller.

    A new email must be free across all actor kinds and must be verified again.
    """
    actor = ctx.actor
    if request.email is not None:
        email = request.email.strip().lower()
        if not email:
            raise ValidationError("Email cannot be empty")
        if email != actor.email:
            if ActorService.email_in_use(db, email, exclude_actor_id=actor.id):
                raise DuplicateEmailError("Email already in use")
            actor.email = email
            actor.email_verified = False

    if request.name and request.name.strip():
        actor.name = request.name.strip()
    if request.phone is not None:
        actor.phone = request.phone
    if request.bio is not None:
        actor.bio = request.bio
    if request.profile_photo is not None:
        actor.profile_photo = request.profile_photo

    db.commit()
    db.refresh(actor)
    logger.info(f"Actor {actor.id} updated profile")
    return UserResponse(user=ActorResponse.model_validate(actor))


@router.put("/change-password", summary="Change password")
async def change_password(
    request: ChangePasswordRequest,
    ctx: ActorContext = Depends(get_current_actor),
    db: Session = Depends(get_db)
) -> SuccessResponse:
    if not request.current_password or not request.new_password:
        raise ValidationError("Please provide current and new password")
    new_password = _checked_new_password(request.new_password)

    ActorService.change_password(db, ctx.actor, request.current_password, new_password)
    return SuccessResponse(message="Password changed successfully")


@router.post("/forgot-password", summary="Request a password reset code")
async def forgot_password(
    request: EmailRequest,
    db: Session = Depends(get_db)
) -> SuccessResponse:
    """
    Email a reset code. Unknown emails get the same answer as known ones.
    """
    if not request.email:
        raise ValidationError("Please provide email")

    actor = ActorService.find_by_email(db, request.email)
    if actor is not None:
        VerificationService.request_password_reset(db, actor)
    return SuccessResponse(message=FORGOT_PASSWORD_MESSAGE)


@router.post("/verify-reset-token", summary="Check a password reset code")
async def verify_reset_token(
    request: CodeRequest,
    db: Session = Depends(get_db)
) -> SuccessResponse:
    if not request.token:
        raise ValidationError("Reset token is required")
    if VerificationService.find_by_reset_code(db, request.token) is None:
        raise ValidationError("Invalid or expired code.")
    return SuccessResponse(message="Token verified successfully.")


@router.put("/reset-password", summary="Reset password with a code")
async def reset_password(
    request: ResetPasswordRequest,
    db: Session = Depends(get_db)
) -> SuccessResponse:
    if not request.token or not request.new_password:
        raise ValidationError("Please provide code and new password")
    new_password = _checked_new_password(request.new_password)

    VerificationService.reset_password(db, request.token, new_password)
    return SuccessResponse(message="Password reset successfully")


@router.post("/verify-email", summary="Verify email address")
async def verify_email(
    request: CodeRequest,
    db: Session = Depends(get_db)
) -> SuccessResponse:
    VerificationService.verify_email(db, request.token)
    return SuccessResponse(message="Email verified successfully")


@router.post("/resend-verification", summary="Resend the verification code")
async def resend_verification(
    ctx: ActorContext = Depends(get_current_actor),
    db: Session = Depends(get_db)
) -> SuccessResponse:
    VerificationService.resend_verification(db, ctx.actor)
    return SuccessResponse(message="Verification email sent")


@router.post("/refresh-token", summary="Re-issue the access token")
async def refresh_token(
    ctx: ActorContext = Depends(get_current_actor)
) -> TokenResponse:
    """Requires a still-valid token; the stored role is embedded."""
    return TokenResponse(token=jwt_service.refresh_token(ctx.token, role=ctx.actor.role))


@router.get("/my-specialist", summary="Get the parent's linked specialist")
async def get_my_specialist(
    ctx: ActorContext = Depends(require_parent),
    db: Session = Depends(get_db)
) -> MySpecialistResponse:
    parent: Parent = ctx.actor  # type: ignore[assignment]
    specialist = None
    if parent.linked_specialist_id is not None:
        specialist = db.query(Specialist).filter(Specialist.id == parent.linked_specialist_id).first()
    if specialist is None:
        raise NotFoundError("No specialist linked to this account")

    center = None
    if specialist.center_id is not None:
        center = db.query(Center).filter(Center.id == specialist.center_id).first()

    return MySpecialistResponse(
        specialist=ActorResponse.model_validate(specialist),
        center=CenterResponse.model_validate(center) if center else None,
    )
