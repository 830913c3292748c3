"""
Email delivery for one-time codes.

Sends over SMTP (STARTTLS) when SMTP_HOST is configured. Without SMTP the
message is dropped with a warning so local runs keep working.
"""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from core import config

logger = logging.getLogger(__name__)


class EmailDeliveryError(Exception):
    """The SMTP server refused or could not be reached."""


def _send(to_email: str, subject: str, html_body: str) -> None:
    if not config.SMTP_HOST:
        logger.warning(f"SMTP not configured, email '{subject}' to {to_email} not sent")
        return

    sender = config.EMAIL_FROM or config.SMTP_USER or "noreply@localhost"
    msg = MIMEMultipart()
    msg["From"] = sender
    msg["To"] = to_email
    msg["Subject"] = subject
    msg.attach(MIMEText(html_body, "html", "utf-8"))

    try:
        with smtplib.SMTP(config.SMTP_HOST, config.SMTP_PORT) as server:
            server.starttls()
            if config.SMTP_USER:
                server.login(config.SMTP_USER, config.SMTP_PASSWORD)
            server.sendmail(sender, [to_email], msg.as_string())
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"Failed to send email '{subject}' to {to_email}: {e}")
        raise EmailDeliveryError(str(e)) from e

    logger.info(f"Sent email '{subject}' to {to_email}")


def send_verification_email(to_email: str, code: str) -> None:
    html_body = f"""
    <h2>تأكيد البريد الإلكتروني</h2>
    <p>رمز التحقق الخاص بك هو:</p>
    <h1 style="letter-spacing: 4px;">{code}</h1>
    """
    _send(to_email, "Verify your email", html_body)


def send_password_reset_email(to_email: str, code: str) -> None:
    html_body = f"""
    <h2>إعادة تعيين كلمة المرور</h2>
    <p>رمز إعادة التعيين صالح لمدة {config.PASSWORD_RESET_CODE_EXPIRE_MINUTES} دقائق:</p>
    <h1 style="letter-spacing: 4px;">{code}</h1>
    """
    _send(to_email, "Password reset code", html_body)
