from __future__ import annotations

import smtplib
from collections import Counter

import pytest

from app.core import security
from app.core.config import Settings
from app.core.exceptions import DeliveryError
from app.services import email as email_service
from app.services.email import SmtpEmailSender, build_otp_email


def test_otp_email_states_code_and_validity() -> None:
    subject, body, html_body = build_otp_email("482913", app_name="Heritage Bites", minutes=10)

    assert subject == "Your OTP for Password Reset"
    assert "482913" in body
    assert "valid for 10 minutes" in body
    assert "482913" in html_body
    assert "Heritage Bites Password Reset" in html_body


def test_otp_email_escapes_app_name() -> None:
    _, _, html_body = build_otp_email("482913", app_name="<Bites>", minutes=10)
    assert "&lt;Bites&gt;" in html_body


class _FakeSMTP:
    instances: list["_FakeSMTP"] = []
    fail_with: Exception | None = None

    def __init__(self, host, port, timeout):  # noqa: ANN001
        self.host = host
        self.port = port
        self.calls: list[str] = []
        self.messages = []
        _FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):  # noqa: ANN002
        return False

    def ehlo(self) -> None:
        self.calls.append("ehlo")

    def starttls(self) -> None:
        self.calls.append("starttls")

    def login(self, user, password) -> None:  # noqa: ANN001
        self.calls.append(f"login:{user}")

    def send_message(self, message) -> None:  # noqa: ANN001
        if _FakeSMTP.fail_with:
            raise _FakeSMTP.fail_with
        self.messages.append(message)


@pytest.fixture
def fake_smtp(monkeypatch):
    _FakeSMTP.instances = []
    _FakeSMTP.fail_with = None
    monkeypatch.setattr(email_service.smtplib, "SMTP", _FakeSMTP)
    return _FakeSMTP


def _sender(**overrides) -> SmtpEmailSender:  # noqa: ANN003
    options = {
        "host": "smtp.example.com",
        "port": 587,
        "username": "mailer",
        "password": "secret",
        "sender": "no-reply@example.com",
        "use_tls": True,
    }
    options.update(overrides)
    return SmtpEmailSender(**options)


def test_smtp_sender_delivers_multipart_message(fake_smtp) -> None:
    _sender().send("user@example.com", "Subject", "plain", html_body="<p>html</p>")

    server = fake_smtp.instances[0]
    assert server.host == "smtp.example.com"
    assert server.calls == ["ehlo", "starttls", "ehlo", "login:mailer"]
    message = server.messages[0]
    assert message["To"] == "user@example.com"
    assert message["From"] == "no-reply@example.com"
    assert message.is_multipart()


def test_smtp_sender_requires_configuration(fake_smtp) -> None:
    with pytest.raises(DeliveryError):
        _sender(host="").send("user@example.com", "Subject", "plain")
    with pytest.raises(DeliveryError):
        _sender(sender="").send("user@example.com", "Subject", "plain")
    assert fake_smtp.instances == []


def test_smtp_sender_wraps_transport_errors(fake_smtp) -> None:
    fake_smtp.fail_with = smtplib.SMTPRecipientsRefused({"user@example.com": (550, b"no such user")})

    with pytest.raises(DeliveryError) as excinfo:
        _sender().send("user@example.com", "Subject", "plain")
    assert excinfo.value.status_code == 500


def test_generate_otp_bounds(monkeypatch) -> None:
    monkeypatch.setattr(security.secrets, "randbelow", lambda n: 0)
    assert security.generate_otp() == "100000"

    monkeypatch.setattr(security.secrets, "randbelow", lambda n: n - 1)
    assert security.generate_otp() == "999999"


def test_generate_otp_is_always_six_digits() -> None:
    codes = [security.generate_otp() for _ in range(2000)]

    assert all(len(code) == 6 and code.isdigit() and code[0] != "0" for code in codes)
    assert max(Counter(codes).values()) < 10


def test_reset_tokens_are_unique_hex() -> None:
    tokens = {security.generate_reset_token() for _ in range(100)}

    assert len(tokens) == 100
    assert all(len(token) == 64 and int(token, 16) >= 0 for token in tokens)


def test_production_settings_require_delivery_and_provider() -> None:
    settings = Settings(_env_file=None, ENV="production", SMTP_HOST="", SMTP_FROM="", IDENTITY_PROVIDER="supabase")

    with pytest.raises(RuntimeError) as excinfo:
        settings.validate_runtime_security()

    message = str(excinfo.value)
    assert "SMTP_HOST" in message
    assert "SMTP_FROM" in message
    assert "SUPABASE_URL" in message
    assert "SUPABASE_SERVICE_ROLE_KEY" in message


def test_development_settings_skip_validation() -> None:
    Settings(_env_file=None, ENV="development", SMTP_HOST="").validate_runtime_security()


def test_cors_origins_are_split() -> None:
    settings = Settings(_env_file=None, CORS_ORIGINS="http://localhost:4028, https://app.example.com ,")
    assert settings.cors_origins == ["http://localhost:4028", "https://app.example.com"]
