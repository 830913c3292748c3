"""
Tests for email verification and password reset codes.
"""

from datetime import timedelta
from unittest.mock import patch

import pytest

from core.errors import InternalError, ValidationError
from services import ActorService, VerificationService
from services.email_service import EmailDeliveryError
from services.verification_service import generate_code, hash_code
from utils.datetime_utils import utc_now


class TestCodes:

    def test_code_is_six_digits(self):
        for _ in range(20):
            code = generate_code()
            assert len(code) == 6
            assert code.isdigit()

    def test_hash_is_stable_and_not_plaintext(self):
        assert hash_code("123456") == hash_code(" 123456 ")
        assert hash_code("123456") != "123456"


class TestEmailVerification:

    def test_only_digest_is_stored(self, db_session, make):
        parent = make.parent(verified=False)

        code = VerificationService.issue_verification_code(db_session, parent)

        assert parent.verification_code_hash == hash_code(code)

    def test_verify_marks_actor_and_consumes_code(self, db_session, make):
        parent = make.parent(verified=False)
        code = VerificationService.issue_verification_code(db_session, parent)

        VerificationService.verify_email(db_session, code)

        assert parent.email_verified is True
        assert parent.verification_code_hash is None
        with pytest.raises(ValidationError):
            VerificationService.verify_email(db_session, code)

    @pytest.mark.parametrize("code", [None, "", "   "])
    def test_verify_requires_code(self, db_session, code):
        with pytest.raises(ValidationError, match="required"):
            VerificationService.verify_email(db_session, code)

    def test_verify_unknown_code(self, db_session):
        with pytest.raises(ValidationError, match="Invalid"):
            VerificationService.verify_email(db_session, "000000")

    def test_send_failure_keeps_account(self, db_session, make):
        parent = make.parent(verified=False)

        with patch("services.verification_service.send_verification_email", side_effect=EmailDeliveryError("down")):
            VerificationService.send_verification(db_session, parent, raise_on_failure=False)

        assert parent.verification_code_hash is not None

    def test_resend_failure_is_reported(self, db_session, make):
        parent = make.parent(verified=False)

        with patch("services.verification_service.send_verification_email", side_effect=EmailDeliveryError("down")):
            with pytest.raises(InternalError):
                VerificationService.resend_verification(db_session, parent)

    def test_resend_to_verified_actor(self, db_session, make):
        parent = make.parent(verified=True)

        with pytest.raises(ValidationError, match="already verified"):
            VerificationService.resend_verification(db_session, parent)


class TestPasswordReset:

    def test_reset_flow(self, db_session, make):
        parent = make.parent(email="reset@example.com")
        with patch("services.verification_service.generate_code", return_value="654321"):
            VerificationService.request_password_reset(db_session, parent)

        assert VerificationService.find_by_reset_code(db_session, "654321").id == parent.id

        VerificationService.reset_password(db_session, "654321", "brandnew1")

        assert ActorService.authenticate(db_session, "reset@example.com", "brandnew1") is not None
        assert parent.reset_code_hash is None
        assert VerificationService.find_by_reset_code(db_session, "654321") is None

    def test_expired_code_is_rejected(self, db_session, make):
        parent = make.parent()
        with patch("services.verification_service.generate_code", return_value="111111"):
            VerificationService.request_password_reset(db_session, parent)
        parent.reset_code_expires_at = utc_now() - timedelta(minutes=1)
        db_session.commit()

        with pytest.raises(ValidationError, match="Invalid or expired code"):
            VerificationService.reset_password(db_session, "111111", "brandnew1")

    def test_delivery_failure_withdraws_code(self, db_session, make):
        parent = make.parent()

        with patch("services.verification_service.send_password_reset_email", side_effect=EmailDeliveryError("down")):
            with pytest.raises(InternalError):
                VerificationService.request_password_reset(db_session, parent)

        assert parent.reset_code_hash is None
        assert parent.reset_code_expires_at is None
