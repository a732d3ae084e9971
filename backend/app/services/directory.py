"""User directory: lookup and update of per-user reset state."""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass
from typing import Any, Protocol
from uuid import UUID

from sqlalchemy.orm import Session

from app.models.user import User

logger = logging.getLogger(__name__)

RESET_FIELDS = frozenset({"otp", "otp_expiry", "reset_token", "reset_token_expiry"})


@dataclass(frozen=True)
class ResetRecord:
    id: UUID
    email: str
    otp: str | None = None
    otp_expiry: dt.datetime | None = None
    reset_token: str | None = None
    reset_token_expiry: dt.datetime | None = None


class UserDirectory(Protocol):
    def find_by_email(self, email: str) -> ResetRecord | None: ...

    def find_by_reset_token(self, token: str) -> ResetRecord | None: ...

    def update(self, user_id: UUID, fields: dict[str, Any]) -> None: ...


def as_utc(value: dt.datetime | None) -> dt.datetime | None:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value.astimezone(dt.timezone.utc)


def _to_record(user: User) -> ResetRecord:
    return ResetRecord(
        id=user.id,
        email=user.email,
        otp=user.otp,
        otp_expiry=as_utc(user.otp_expiry),
        reset_token=user.reset_token,
        reset_token_expiry=as_utc(user.reset_token_expiry),
    )


class SqlAlchemyUserDirectory:
    """Directory backed by the ``users`` table."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def find_by_email(self, email: str) -> ResetRecord | None:
        user = self.db.query(User).filter(User.email == email.lower()).first()
        return _to_record(user) if user else None

    def find_by_reset_token(self, token: str) -> ResetRecord | None:
        user = self.db.query(User).filter(User.reset_token == token).first()
        return _to_record(user) if user else None

    def update(self, user_id: UUID, fields: dict[str, Any]) -> None:
        unknown = set(fields) - RESET_FIELDS
        if unknown:
            raise ValueError(f"unsupported_fields: {', '.join(sorted(unknown))}")

        values = {getattr(User, name): value for name, value in fields.items()}
        try:
            updated = (
                self.db.query(User)
                .filter(User.id == user_id)
                .update(values, synchronize_session=False)
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        if not updated:
            logger.warning("Directory update matched no user: %s", user_id)
