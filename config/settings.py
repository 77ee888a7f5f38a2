"""
Application settings loaded from environment variables.
"""

from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── JWT ──────────────────────────────────────────────────────────────
    jwt_secret: str
    jwt_issuer: str = "MessageBoard.API"
    jwt_audience: str = "MessageBoard.Client"
    jwt_expiry_minutes: int = 60
    jwt_algorithm: str = "HS256"

    # ── Passwords ────────────────────────────────────────────────────────
    bcrypt_rounds: int = 12

    # ── Database ─────────────────────────────────────────────────────────
    database_url: str = "sqlite+aiosqlite:///./messageboard.db"
    seed_sample_data: bool = False

    # ── Server ───────────────────────────────────────────────────────────
    port: int = 5285
    host: str = "0.0.0.0"
    debug: bool = False
    cors_origins: List[str] = ["http://localhost:3000"]

    model_config = {
        "env_file": ".env",
        "case_sensitive": False,
    }

    @field_validator("jwt_secret")
    @classmethod
    def _secret_not_empty(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("JWT_SECRET must be set to a non-empty value")
        return value

    @field_validator("jwt_expiry_minutes")
    @classmethod
    def _expiry_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("JWT_EXPIRY_MINUTES must be positive")
        return value


config = Settings()
