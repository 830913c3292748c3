"""
One-time codes for email verification and password reset.

Codes are six random digits. Only their SHA-256 digest is stored, so the
lookup stays indexed while a database leak does not reveal live codes.
Reset codes expire after PASSWORD_RESET_CODE_EXPIRE_MINUTES; verification
codes live until used or replaced.
"""

import hashlib
import logging
import secrets
from typing import Optional

from sqlalchemy.orm import Session

from core import config
from core.constants import ONE_TIME_CODE_DIGITS
from core.errors import InternalError, ValidationError
from models import Actor
from services.email_service import (
    EmailDeliveryError, send_password_reset_email, send_verification_email
)
from services.password_service import hash_password
from utils.datetime_utils import is_expired, minutes_from_now

logger = logging.getLogger(__name__)


def generate_code() -> str:
    """Random zero-padded numeric code."""
    return str(secrets.randbelow(10 ** ONE_TIME_CODE_DIGITS)).zfill(ONE_TIME_CODE_DIGITS)


def hash_code(code: str) -> str:
    return hashlib.sha256(code.strip().encode('utf-8')).hexdigest()


class VerificationService:
    """Issue, check and consume one-time codes."""

    # ===== Email verification =====

    @staticmethod
    def issue_verification_code(db: Session, actor: Actor) -> str:
        """Store a fresh verification code for the actor and return it."""
        code = generate_code()
        actor.verification_code_hash = hash_code(code)
        db.commit()
        return code

    @staticmethod
    def send_verification(db: Session, actor: Actor, raise_on_failure: bool = False) -> None:
        """
        Issue a verification code and email it.

        Registration passes ``raise_on_failure=False``: the account is kept and
        the user can ask for a new code later.
        """
        code = VerificationService.issue_verification_code(db, actor)
        try:
            send_verification_email(actor.email, code)
        except EmailDeliveryError:
            logger.error(f"Verification email for actor {actor.id} could not be sent")
            if raise_on_failure:
                raise InternalError("Email could not be sent")

    @staticmethod
    def resend_verification(db: Session, actor: Actor) -> None:
        if actor.email_verified:
            raise ValidationError("Email already verified")
        VerificationService.send_verification(db, actor, raise_on_failure=True)

    @staticmethod
    def verify_email(db: Session, code: Optional[str]) -> Actor:
        """
        Mark the actor holding this code as verified and consume the code.

        Raises:
            ValidationError: Missing or unknown code
        """
        if not code or not code.strip():
            raise ValidationError("Verification token is required")

        actor = db.query(Actor).filter(Actor.verification_code_hash == hash_code(code)).first()
        if actor is None:
            raise ValidationError("Invalid verification token")

        actor.email_verified = True
        actor.verification_code_hash = None
        db.commit()
        logger.info(f"Email verified for actor {actor.id}")
        return actor

    # ===== Password reset =====

    @staticmethod
    def request_password_reset(db: Session, actor: Actor) -> None:
        """
        Issue and email a reset code.

        A code that could not be delivered is withdrawn before failing.

        Raises:
            InternalError: Email delivery failed
        """
        code = generate_code()
        actor.reset_code_hash = hash_code(code)
        actor.reset_code_expires_at = minutes_from_now(config.PASSWORD_RESET_CODE_EXPIRE_MINUTES)
        db.commit()

        try:
            send_password_reset_email(actor.email, code)
        except EmailDeliveryError:
            actor.reset_code_hash = None
            actor.reset_code_expires_at = None
            db.commit()
            raise InternalError("Email could not be sent")

        logger.info(f"Password reset code issued for actor {actor.id}")

    @staticmethod
    def find_by_reset_code(db: Session, code: Optional[str]) -> Optional[Actor]:
        """Actor holding this unexpired reset code, if any."""
        if not code or not code.strip():
            return None
        candidates = db.query(Actor).filter(Actor.reset_code_hash == hash_code(code)).all()
        for actor in candidates:
            if not is_expired(actor.reset_code_expires_at):
                return actor
        return None

    @staticmethod
    def reset_password(db: Session, code: Optional[str], new_password: str) -> Actor:
        """
        Replace the password of the actor holding the code and consume it.

        Raises:
            ValidationError: Unknown or expired code
        """
        actor = VerificationService.find_by_reset_code(db, code)
        if actor is None:
            raise ValidationError("Invalid or expired code")

        actor.password_hash = hash_password(new_password)
        actor.reset_code_hash = None
        actor.reset_code_expires_at = None
        db.commit()
        logger.info(f"Password reset for actor {actor.id}")
        return actor
