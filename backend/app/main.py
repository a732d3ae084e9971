from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.logging import setup_logging
from app.core.exceptions import InternalError, ResetServiceException, ValidationError
from app.core.security_headers import install_security_headers_middleware
from app.routers import reset

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    setup_logging(settings.LOG_LEVEL)
    settings.validate_runtime_security()

    app = FastAPI(title=f"{settings.APP_NAME} Password Reset")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    install_security_headers_middleware(app, settings)

    app.include_router(reset.router, tags=["password-reset"])

    @app.get("/health", tags=["health"])
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.exception_handler(ResetServiceException)
    async def handle_reset_exception(_: Request, exc: ResetServiceException) -> JSONResponse:
        headers = exc.headers if getattr(exc, "headers", None) else None
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(_: Request, exc: RequestValidationError) -> JSONResponse:
        # Only field locations are reported; submitted values may be passwords.
        fields = [".".join(str(part) for part in error.get("loc", ())) for error in exc.errors()]
        logger.info("Rejected malformed request body: %s", fields)
        error = ValidationError("Invalid request body", details={"fields": fields})
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.exception_handler(Exception)
    async def handle_unexpected(_: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled request failure: %s", exc.__class__.__name__)
        error = InternalError()
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    return app


app = create_app()
