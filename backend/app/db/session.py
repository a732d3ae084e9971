"""Database engine and session lifecycle helpers."""

from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core.config import settings


def _connect_args(url: str) -> dict[str, object]:
    # Request handlers run in a threadpool; SQLite connections must be shareable across threads.
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


# Statement parameters include OTPs and reset tokens; keep them out of error messages.
engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    hide_parameters=True,
    connect_args=_connect_args(settings.DATABASE_URL),
)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
