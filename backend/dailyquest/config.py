from __future__ import annotations

import os
from dataclasses import dataclass, field, replace


def _normalize_database_url(url: str) -> str:
    # Render/Heroku sometimes provide postgres:// which SQLAlchemy expects as postgresql://
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql://", 1)
    return url


def _flag(raw: str | None, default: bool = False) -> bool:
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "y", "on")


def _positive_int(name: str, raw: str | None, default: int) -> int:
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise RuntimeError(f"{name} environment variable is not a number.")
    if value <= 0:
        raise RuntimeError(f"{name} environment variable is not a positive number.")
    return value


@dataclass(frozen=True)
class Config:
    """Application configuration, read once at boot and injected everywhere else."""

    env: str = "dev"
    secret_key: str = "dev-secret"
    database_url: str = ""
    cors_origins: tuple[str, ...] = ("*",)
    session_ttl_seconds: int = 60 * 60 * 24

    ai_challenges_enabled: bool = False
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash"
    ai_timeout_seconds: int = 10

    weather_api_enabled: bool = False
    open_weather_map_api_key: str = ""
    weather_timeout_seconds: int = 10

    # Extra Flask settings (tests use this for TESTING and friends)
    flask_overrides: dict = field(default_factory=dict)

    @property
    def is_production(self) -> bool:
        return self.env in ("prod", "production")

    @classmethod
    def from_env(cls, instance_dir: str | None = None) -> "Config":
        env = (os.getenv("DAILYQUEST_ENV", "dev") or "dev").strip().lower()

        database_url = os.getenv("SQLALCHEMY_DATABASE_URI") or os.getenv("DATABASE_URL") or ""
        if not database_url and instance_dir and env not in ("prod", "production"):
            sqlite_path = os.path.join(instance_dir, "dailyquest.db").replace(os.sep, "/")
            database_url = f"sqlite:///{sqlite_path}"

        cors_raw = (os.getenv("CORS_ORIGINS") or "").strip()
        origins = tuple(o.strip() for o in cors_raw.split(",") if o.strip())
        if not origins and env not in ("prod", "production"):
            origins = ("*",)

        return cls(
            env=env,
            secret_key=os.getenv("SECRET_KEY", "dev-secret"),
            database_url=_normalize_database_url(database_url),
            cors_origins=origins,
            session_ttl_seconds=_positive_int(
                "SESSION_TTL_SECONDS", os.getenv("SESSION_TTL_SECONDS"), 60 * 60 * 24
            ),
            ai_challenges_enabled=_flag(os.getenv("AI_CHALLENGES_ENABLED")),
            gemini_api_key=(os.getenv("GEMINI_API_KEY") or "").strip(),
            gemini_model=(os.getenv("GEMINI_MODEL") or "gemini-2.0-flash").strip(),
            ai_timeout_seconds=_positive_int("AI_TIMEOUT_SECONDS", os.getenv("AI_TIMEOUT_SECONDS"), 10),
            weather_api_enabled=_flag(os.getenv("WEATHER_API_ENABLED")),
            open_weather_map_api_key=(os.getenv("OPEN_WEATHER_MAP_API_KEY") or "").strip(),
            weather_timeout_seconds=_positive_int(
                "WEATHER_TIMEOUT_SECONDS", os.getenv("WEATHER_TIMEOUT_SECONDS"), 10
            ),
        )

    def with_overrides(self, **changes) -> "Config":
        return replace(self, **changes)

    def validate(self) -> "Config":
        """Fail fast on settings the app cannot run with."""
        if self.is_production:
            if not self.secret_key or len(self.secret_key) < 16:
                raise RuntimeError("SECRET_KEY must be set and at least 16 chars in production")
            if not self.database_url:
                raise RuntimeError("DATABASE_URL (or SQLALCHEMY_DATABASE_URI) must be set in production")
        if not self.database_url:
            raise RuntimeError("DATABASE_URL (or SQLALCHEMY_DATABASE_URI) must be set")
        if self.session_ttl_seconds <= 0:
            raise RuntimeError("SESSION_TTL_SECONDS must be a positive number")
        if self.ai_timeout_seconds <= 0 or self.weather_timeout_seconds <= 0:
            raise RuntimeError("Request timeouts must be positive numbers")
        if self.ai_challenges_enabled and not self.gemini_api_key:
            raise RuntimeError("GEMINI_API_KEY must be set when AI_CHALLENGES_ENABLED is on")
        return self
