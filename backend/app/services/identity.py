"""Identity providers that own the authoritative password update."""

from __future__ import annotations

import logging
from typing import Any, Protocol
from uuid import UUID

import httpx
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import ProviderError
from app.core.security import hash_password
from app.models.user import User

logger = logging.getLogger(__name__)


class IdentityProvider(Protocol):
    def set_password(self, identity_id: UUID, new_password: str) -> None: ...


class LocalIdentityProvider:
    """Stores the password hash on the user row itself."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def set_password(self, identity_id: UUID, new_password: str) -> None:
        user = self.db.get(User, identity_id)
        if not user:
            raise ProviderError("User not found")

        user.password_hash = hash_password(new_password)
        self.db.add(user)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.info("Password hash updated: %s", identity_id)


class SupabaseIdentityProvider:
    """Updates the password through the Supabase Auth admin API."""

    def __init__(
        self,
        base_url: str,
        service_role_key: str,
        *,
        timeout: float = 20.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.service_role_key = service_role_key
        self.timeout = timeout
        self.transport = transport

    def _headers(self) -> dict[str, str]:
        return {
            "apikey": self.service_role_key,
            "Authorization": f"Bearer {self.service_role_key}",
            "Accept": "application/json",
        }

    def set_password(self, identity_id: UUID, new_password: str) -> None:
        url = f"{self.base_url}/auth/v1/admin/users/{identity_id}"
        try:
            with httpx.Client(timeout=self.timeout, headers=self._headers(), transport=self.transport) as client:
                response = client.put(url, json={"password": new_password})
        except httpx.HTTPError as exc:
            logger.warning("Supabase admin request failed for %s: %s", identity_id, exc.__class__.__name__)
            raise ProviderError("Identity provider unavailable") from exc

        if response.is_success:
            logger.info("Supabase password updated: %s", identity_id)
            return

        message = _error_message(response)
        logger.warning("Supabase rejected password update for %s (status=%s)", identity_id, response.status_code)
        raise ProviderError(message)


def _error_message(response: httpx.Response) -> str:
    try:
        payload: Any = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        for key in ("msg", "message", "error_description", "error"):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return f"Identity provider returned status {response.status_code}"


def build_identity_provider(db: Session) -> IdentityProvider:
    kind = settings.identity_provider
    if kind == "supabase":
        return SupabaseIdentityProvider(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)
    if kind == "local":
        return LocalIdentityProvider(db)
    raise ValueError(f"unknown_identity_provider: {kind}")
