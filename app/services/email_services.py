import logging
import smtplib
from email.mime.text import MIMEText

from app.config import Settings

logger = logging.getLogger(__name__)

APP_NAME = "YYC-Track"

VERIFICATION_TEMPLATE = """
<div style="font-family:Arial, Helvetica, sans-serif; color:#333;">
  <h2>Thank you for registering with {{APP}}!</h2>
  <p>Your verification code is:</p>
  <p style="font-size:28px; font-weight:bold; letter-spacing:6px;">{{CODE}}</p>
  <p>This code will expire in {{MINUTES}} minutes.</p>
  <p>If you didn't create an account, please ignore this email.</p>
</div>
"""

RESET_TEMPLATE = """
<div style="font-family:Arial, Helvetica, sans-serif; color:#333;">
  <h2>Password Reset Request</h2>
  <p>You requested to reset your password for your {{APP}} account.</p>
  <p><a href="{{URL}}">Reset Password</a></p>
  <p>Or copy and paste this link into your browser:</p>
  <p>{{URL}}</p>
  <p><strong>This link will expire in {{MINUTES}} minutes.</strong></p>
  <p>If you didn't request a password reset, please ignore this email and your password will remain unchanged.</p>
</div>
"""


class Notifier:
    """Outbound email over SMTP. Delivery failures are logged and reported as False."""

    def __init__(self, config: Settings):
        self._config = config

    def send(self, recipient: str, subject: str, html_message: str) -> bool:
        config = self._config
        if not config.smtp_configured:
            logger.warning("SMTP not configured; email '%s' to %s not sent", subject, recipient)
            return False

        msg = MIMEText(html_message, "html")
        msg["Subject"] = subject
        msg["From"] = config.FROM_EMAIL
        msg["To"] = recipient

        try:
            with smtplib.SMTP(config.SMTP_HOST, config.SMTP_PORT, timeout=10) as server:
                server.starttls()
                if config.SMTP_USER:
                    server.login(config.SMTP_USER, config.SMTP_PASS or "")
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            logger.warning("Failed to send email '%s' to %s: %s", subject, recipient, exc)
            return False

        logger.info("Email '%s' sent to %s", subject, recipient)
        return True

    def send_verification_email(self, recipient: str, code: str) -> bool:
        html = (
            VERIFICATION_TEMPLATE.replace("{{APP}}", APP_NAME)
            .replace("{{CODE}}", code)
            .replace("{{MINUTES}}", str(self._config.VERIFICATION_CODE_EXPIRE_MINUTES))
        )
        return self.send(recipient, f"Verify Your Email - {APP_NAME}", html)

    def send_password_reset_email(self, recipient: str, raw_token: str) -> bool:
        reset_url = f"{self._config.FRONTEND_URL}/reset-password/{raw_token}"
        html = (
            RESET_TEMPLATE.replace("{{APP}}", APP_NAME)
            .replace("{{URL}}", reset_url)
            .replace("{{MINUTES}}", str(self._config.RESET_TOKEN_EXPIRE_MINUTES))
        )
        return self.send(recipient, f"Password Reset Request - {APP_NAME}", html)
