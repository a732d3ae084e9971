"""Application configuration loaded from environment variables."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]


class Settings(BaseSettings):
    APP_NAME: str = "Heritage Bites"
    ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str = "postgresql+psycopg://postgres@localhost:5432/heritage_bites"

    OTP_EXPIRE_MINUTES: int = 10
    RESET_TOKEN_EXPIRE_MINUTES: int = 15
    # Clear the stored OTP when the email carrying it could not be sent.
    OTP_ROLLBACK_ON_DELIVERY_FAILURE: bool = True

    SMTP_HOST: str = ""
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_FROM: str = ""
    SMTP_TLS: bool = True

    # "local" stores password hashes in the users table, "supabase" delegates to Supabase Auth.
    IDENTITY_PROVIDER: str = "local"
    SUPABASE_URL: str = ""
    SUPABASE_SERVICE_ROLE_KEY: str = ""

    CORS_ORIGINS: str = "http://localhost:4028"

    model_config = SettingsConfigDict(env_file=str(BASE_DIR / ".env"), env_file_encoding="utf-8")

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        return self.ENV.strip().lower() == "production"

    @property
    def identity_provider(self) -> str:
        return self.IDENTITY_PROVIDER.strip().lower()

    def validate_runtime_security(self) -> None:
        """Fail fast on a production deployment that cannot deliver or apply a reset."""
        if not self.is_production:
            return

        errors: list[str] = []
        if not self.SMTP_HOST.strip():
            errors.append("SMTP_HOST must be set in production")
        if not self.SMTP_FROM.strip():
            errors.append("SMTP_FROM must be set in production")
        if self.identity_provider not in {"local", "supabase"}:
            errors.append("IDENTITY_PROVIDER must be 'local' or 'supabase'")
        if self.identity_provider == "supabase":
            if not self.SUPABASE_URL.startswith(("http://", "https://")):
                errors.append("SUPABASE_URL must be an http(s) URL")
            if not self.SUPABASE_SERVICE_ROLE_KEY.strip():
                errors.append("SUPABASE_SERVICE_ROLE_KEY must be set")

        if errors:
            raise RuntimeError("Invalid configuration:\n- " + "\n- ".join(errors))


settings = Settings()
