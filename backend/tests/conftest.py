from __future__ import annotations

import os
import sys
from pathlib import Path


BASE_DIR = Path(__file__).resolve().parents[1]
if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

# Settings are read at import time; keep tests off the real database and mail relay.
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["ENV"] = "test"
os.environ["IDENTITY_PROVIDER"] = "local"
os.environ["SMTP_HOST"] = ""
os.environ["SMTP_FROM"] = ""

import dataclasses  # noqa: E402
import datetime as dt  # noqa: E402
from uuid import UUID, uuid4  # noqa: E402

import pytest  # noqa: E402

from app.core.exceptions import ProviderError  # noqa: E402
from app.services.directory import ResetRecord  # noqa: E402
from app.services.reset_flow import ResetFlowController  # noqa: E402

T0 = dt.datetime(2026, 3, 1, 12, 0, tzinfo=dt.timezone.utc)


class FakeClock:
    def __init__(self, now: dt.datetime = T0) -> None:
        self.now = now

    def __call__(self) -> dt.datetime:
        return self.now

    def advance(self, **kwargs) -> None:  # noqa: ANN003
        self.now += dt.timedelta(**kwargs)


class FakeDirectory:
    def __init__(self) -> None:
        self.records: dict[UUID, ResetRecord] = {}
        self.updates: list[tuple[UUID, dict]] = []
        self.fail_updates = False
        self.fail_reads = False

    def add_user(self, email: str, **fields) -> ResetRecord:  # noqa: ANN003
        record = ResetRecord(id=uuid4(), email=email, **fields)
        self.records[record.id] = record
        return record

    def get(self, user_id: UUID) -> ResetRecord:
        return self.records[user_id]

    def find_by_email(self, email: str) -> ResetRecord | None:
        if self.fail_reads:
            raise ConnectionError("directory unreachable")
        return next((r for r in self.records.values() if r.email == email), None)

    def find_by_reset_token(self, token: str) -> ResetRecord | None:
        if self.fail_reads:
            raise ConnectionError("directory unreachable")
        return next((r for r in self.records.values() if r.reset_token == token), None)

    def update(self, user_id: UUID, fields: dict) -> None:
        if self.fail_updates:
            raise ConnectionError("directory unreachable")
        self.updates.append((user_id, dict(fields)))
        self.records[user_id] = dataclasses.replace(self.records[user_id], **fields)


class FakeIdentityProvider:
    def __init__(self) -> None:
        self.calls: list[tuple[UUID, str]] = []
        self.error_message: str | None = None

    def set_password(self, identity_id: UUID, new_password: str) -> None:
        if self.error_message:
            raise ProviderError(self.error_message)
        self.calls.append((identity_id, new_password))


class FakeEmailSender:
    def __init__(self) -> None:
        self.sent: list[dict] = []
        self.fail = False

    def send(self, to: str, subject: str, body: str, *, html_body: str | None = None) -> None:
        if self.fail:
            raise OSError("smtp relay down")
        self.sent.append({"to": to, "subject": subject, "body": body, "html_body": html_body})


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def directory() -> FakeDirectory:
    return FakeDirectory()


@pytest.fixture
def identity() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture
def mailer() -> FakeEmailSender:
    return FakeEmailSender()


@pytest.fixture
def flow(directory, identity, mailer, clock) -> ResetFlowController:  # noqa: ANN001
    return ResetFlowController(
        directory,
        identity,
        mailer,
        clock=clock,
        otp_ttl=dt.timedelta(minutes=10),
        reset_token_ttl=dt.timedelta(minutes=15),
        rollback_otp_on_delivery_failure=True,
        app_name="Heritage Bites",
    )
