"""Common FastAPI dependencies for the reset endpoints."""

from __future__ import annotations

from fastapi import Depends
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.services.directory import SqlAlchemyUserDirectory
from app.services.email import SmtpEmailSender
from app.services.identity import build_identity_provider
from app.services.reset_flow import ResetFlowController


def get_reset_flow(db: Session = Depends(get_db)) -> ResetFlowController:
    return ResetFlowController(
        SqlAlchemyUserDirectory(db),
        build_identity_provider(db),
        SmtpEmailSender(),
    )
