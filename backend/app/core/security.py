"""Security helpers for hashing passwords and generating reset secrets."""

from __future__ import annotations

import secrets

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

OTP_MIN = 100000
OTP_MAX = 999999
RESET_TOKEN_BYTES = 32


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    return pwd_context.verify(password, hashed)


def generate_otp() -> str:
    # Drawn from [100000, 999999] so the code is always six digits without padding.
    return str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1))


def generate_reset_token() -> str:
    return secrets.token_hex(RESET_TOKEN_BYTES)


def secrets_match(stored: str, submitted: str) -> bool:
    return secrets.compare_digest(stored.encode("utf-8"), submitted.encode("utf-8"))
