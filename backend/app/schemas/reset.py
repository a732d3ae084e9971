"""Request and response bodies for the OTP password reset endpoints.

Required fields are optional at the schema level so that a missing value
reaches the reset flow and is reported as a validation error with a 400.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.sanitize import clean_email, clean_single_line


class SendOtpRequest(BaseModel):
    email: str | None = None

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value: object) -> object:
        return clean_email(value)


class SendOtpResponse(BaseModel):
    message: str


class VerifyOtpRequest(BaseModel):
    email: str | None = None
    otp: str | None = None

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value: object) -> object:
        return clean_email(value)

    @field_validator("otp", mode="before")
    @classmethod
    def normalize_otp(cls, value: object) -> object:
        return clean_single_line(value)


class VerifyOtpResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    reset_token: str = Field(alias="resetToken")


class ResetPasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    reset_token: str | None = Field(default=None, alias="resetToken")
    new_password: str | None = Field(default=None, alias="newPassword")

    @field_validator("reset_token", mode="before")
    @classmethod
    def normalize_token(cls, value: object) -> object:
        return clean_single_line(value)


class ResetPasswordResponse(BaseModel):
    message: str
