import smtplib

from app.config import Settings
from app.services import email_services
from app.services.email_services import Notifier

SMTP_CONFIG = Settings(
    JWT_SECRET="unit-secret",
    SMTP_HOST="smtp.test",
    SMTP_PORT=2525,
    FROM_EMAIL="noreply@x.com",
    FRONTEND_URL="http://frontend.test",
)


class RecordingSMTP:
    sent = []

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        pass

    def login(self, user, password):
        pass

    def send_message(self, msg):
        RecordingSMTP.sent.append(msg)


class BrokenSMTP(RecordingSMTP):
    def send_message(self, msg):
        raise smtplib.SMTPServerDisconnected("connection lost")


def test_unconfigured_notifier_reports_failure_without_raising():
    notifier = Notifier(Settings(JWT_SECRET="unit-secret"))

    assert notifier.send_verification_email("a@x.com", "123456") is False


def test_reset_email_links_to_the_frontend(monkeypatch):
    RecordingSMTP.sent = []
    monkeypatch.setattr(email_services.smtplib, "SMTP", RecordingSMTP)

    delivered = Notifier(SMTP_CONFIG).send_password_reset_email("a@x.com", "abc123")

    assert delivered is True
    message = RecordingSMTP.sent[0]
    assert message["To"] == "a@x.com"
    assert message["From"] == "noreply@x.com"
    assert "http://frontend.test/reset-password/abc123" in message.get_payload(decode=True).decode()


def test_delivery_errors_are_swallowed(monkeypatch):
    monkeypatch.setattr(email_services.smtplib, "SMTP", BrokenSMTP)

    assert Notifier(SMTP_CONFIG).send_verification_email("a@x.com", "123456") is False
