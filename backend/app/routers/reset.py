"""Password reset endpoints (send OTP, verify OTP, reset password)."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.core.deps import get_reset_flow
from app.schemas.reset import (
    ResetPasswordRequest,
    ResetPasswordResponse,
    SendOtpRequest,
    SendOtpResponse,
    VerifyOtpRequest,
    VerifyOtpResponse,
)
from app.services.reset_flow import ResetFlowController

router = APIRouter()


@router.post("/sendOtp", response_model=SendOtpResponse)
def send_otp(payload: SendOtpRequest, flow: ResetFlowController = Depends(get_reset_flow)) -> SendOtpResponse:
    flow.request_otp(payload.email)
    return SendOtpResponse(message="OTP sent successfully")


@router.post("/verifyOtp", response_model=VerifyOtpResponse)
def verify_otp(payload: VerifyOtpRequest, flow: ResetFlowController = Depends(get_reset_flow)) -> VerifyOtpResponse:
    reset_token = flow.verify_otp(payload.email, payload.otp)
    return VerifyOtpResponse(message="OTP verified successfully", reset_token=reset_token)


@router.post("/resetPassword", response_model=ResetPasswordResponse)
def reset_password(
    payload: ResetPasswordRequest,
    flow: ResetFlowController = Depends(get_reset_flow),
) -> ResetPasswordResponse:
    flow.reset_password(payload.reset_token, payload.new_password)
    return ResetPasswordResponse(message="Password updated successfully")
