"""OTP password reset flow: send a code, exchange it for a token, set a password.

State lives on the user's directory record in four fields: ``otp``,
``otp_expiry``, ``reset_token`` and ``reset_token_expiry``. Issuing an OTP
overwrites any earlier one; verifying it clears the OTP pair and sets the
token pair in a single update; a successful reset clears the token pair.
Expiry is only checked when a secret is used, nothing sweeps stale values.

Every collaborator failure is turned into one of the exceptions in
``app.core.exceptions`` before it leaves this module.
"""

from __future__ import annotations

import datetime as dt
import logging
from typing import Callable, NoReturn

from app.core.config import settings
from app.core.exceptions import (
    DeliveryError,
    ExpiredError,
    InternalError,
    InvalidCredentialError,
    InvalidTokenError,
    NotFoundError,
    ResetServiceException,
    ValidationError,
)
from app.core.security import generate_otp, generate_reset_token, secrets_match
from app.services.directory import ResetRecord, UserDirectory
from app.services.email import EmailSender, build_otp_email
from app.services.identity import IdentityProvider

logger = logging.getLogger(__name__)

Clock = Callable[[], dt.datetime]


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


class ResetFlowController:
    def __init__(
        self,
        directory: UserDirectory,
        identity_provider: IdentityProvider,
        email_sender: EmailSender,
        *,
        clock: Clock = _utcnow,
        otp_ttl: dt.timedelta | None = None,
        reset_token_ttl: dt.timedelta | None = None,
        rollback_otp_on_delivery_failure: bool | None = None,
        app_name: str | None = None,
    ) -> None:
        self.directory = directory
        self.identity_provider = identity_provider
        self.email_sender = email_sender
        self.clock = clock
        if otp_ttl is None:
            otp_ttl = dt.timedelta(minutes=settings.OTP_EXPIRE_MINUTES)
        if reset_token_ttl is None:
            reset_token_ttl = dt.timedelta(minutes=settings.RESET_TOKEN_EXPIRE_MINUTES)
        self.otp_ttl = otp_ttl
        self.reset_token_ttl = reset_token_ttl
        if rollback_otp_on_delivery_failure is None:
            rollback_otp_on_delivery_failure = settings.OTP_ROLLBACK_ON_DELIVERY_FAILURE
        self.rollback_otp_on_delivery_failure = rollback_otp_on_delivery_failure
        self.app_name = app_name or settings.APP_NAME

    def request_otp(self, email: str | None) -> None:
        """Store a fresh OTP for ``email`` and mail it to that address."""
        if _is_blank(email):
            raise ValidationError("Email is required")

        try:
            user = self._find_by_email(email)
            otp = generate_otp()
            otp_expiry = self.clock() + self.otp_ttl
            self.directory.update(user.id, {"otp": otp, "otp_expiry": otp_expiry})
            logger.info("OTP issued: %s", user.email)
            self._deliver_otp(user, otp)
        except ResetServiceException:
            raise
        except Exception as exc:
            self._internal_failure("request_otp", exc)

    def verify_otp(self, email: str | None, otp: str | None) -> str:
        """Exchange a valid OTP for a reset token and return the token."""
        if _is_blank(email) or _is_blank(otp):
            raise ValidationError("Email and OTP required")

        try:
            user = self._find_by_email(email)
            if user.otp is None or not secrets_match(user.otp, otp):
                logger.warning("OTP verification failed: invalid code (%s)", user.email)
                raise InvalidCredentialError("Invalid OTP")

            now = self.clock()
            if user.otp_expiry is None or now > user.otp_expiry:
                logger.warning("OTP verification failed: expired code (%s)", user.email)
                raise ExpiredError("OTP expired")

            reset_token = generate_reset_token()
            self.directory.update(
                user.id,
                {
                    "otp": None,
                    "otp_expiry": None,
                    "reset_token": reset_token,
                    "reset_token_expiry": now + self.reset_token_ttl,
                },
            )
            logger.info("OTP verified, reset token issued: %s", user.email)
            return reset_token
        except ResetServiceException:
            raise
        except Exception as exc:
            self._internal_failure("verify_otp", exc)

    def reset_password(self, reset_token: str | None, new_password: str | None) -> None:
        """Apply ``new_password`` through the identity provider and burn the token."""
        if _is_blank(reset_token) or not new_password:
            raise ValidationError("Missing reset token or password")

        try:
            user = self.directory.find_by_reset_token(reset_token)
            if user is None:
                logger.warning("Password reset failed: unknown reset token")
                raise InvalidTokenError("Invalid reset token")

            # Tokens without an expiry are refused rather than treated as permanent.
            if user.reset_token_expiry is None or user.reset_token_expiry < self.clock():
                logger.warning("Password reset failed: expired reset token (%s)", user.id)
                raise ExpiredError("Reset token expired")

            self.identity_provider.set_password(user.id, new_password)
            self.directory.update(user.id, {"reset_token": None, "reset_token_expiry": None})
            logger.info("Password reset success: %s", user.id)
        except ResetServiceException:
            raise
        except Exception as exc:
            self._internal_failure("reset_password", exc)

    def _find_by_email(self, email: str) -> ResetRecord:
        user = self.directory.find_by_email(email.strip())
        if user is None:
            logger.warning("Reset flow lookup failed: user not found (%s)", email.strip())
            raise NotFoundError("User not found")
        return user

    def _deliver_otp(self, user: ResetRecord, otp: str) -> None:
        minutes = int(self.otp_ttl.total_seconds() // 60)
        subject, body, html_body = build_otp_email(otp, app_name=self.app_name, minutes=minutes)
        try:
            self.email_sender.send(user.email, subject, body, html_body=html_body)
        except Exception as exc:
            logger.error("OTP email delivery failed: %s (%s)", user.email, exc.__class__.__name__)
            if self.rollback_otp_on_delivery_failure:
                self._discard_undelivered_otp(user)
            raise DeliveryError("Failed to send OTP email") from exc

    def _discard_undelivered_otp(self, user: ResetRecord) -> None:
        try:
            self.directory.update(user.id, {"otp": None, "otp_expiry": None})
        except Exception:
            logger.exception("Could not clear undelivered OTP: %s", user.email)

    @staticmethod
    def _internal_failure(operation: str, exc: Exception) -> NoReturn:
        logger.exception("Reset flow %s failed: %s", operation, exc.__class__.__name__)
        raise InternalError() from exc
