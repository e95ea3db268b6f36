# config.py
import logging
import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

load_dotenv()

logger = logging.getLogger(__name__)

# --- Insecure defaults ---
# Only acceptable for local development. Settings.check() refuses them when
# APP_ENV=production.
INSECURE_DEFAULT_SECRET = "insecure-default-scoreboard-secret-change-me"
# Placeholder secrets that are refused the same way as the default.
INSECURE_SECRETS = {INSECURE_DEFAULT_SECRET, "change-me", "changeme", "secret", "your-secret-key-change-in-production"}
INSECURE_DEFAULT_URLS = {
    "document": "mongodb://localhost:27017/scoreboard",
    "relational": "sqlite:///./scoreboard.db",
}

BACKENDS = ("memory", "document", "relational")


class ConfigurationError(RuntimeError):
    """Raised when the environment does not describe a usable configuration."""


class InsecureConfigurationError(ConfigurationError):
    """Raised when a production configuration relies on a built-in default."""


class Settings(BaseModel):
    app_env: str = "development"
    jwt_secret: str = INSECURE_DEFAULT_SECRET
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 1440
    storage_backend: str = "memory"
    database_url: Optional[str] = None
    cors_origins: List[str] = Field(default_factory=lambda: ["http://localhost:3000"])
    log_level: str = "INFO"

    @property
    def is_production(self) -> bool:
        return self.app_env.lower() == "production"

    @property
    def uses_default_secret(self) -> bool:
        return self.jwt_secret in INSECURE_SECRETS

    def resolved_database_url(self) -> Optional[str]:
        """Connection string for the configured backend, falling back to the insecure default."""
        if self.storage_backend == "memory":
            return None
        return self.database_url or INSECURE_DEFAULT_URLS[self.storage_backend]

    def check(self) -> "Settings":
        if self.storage_backend not in BACKENDS:
            raise InsecureConfigurationError(
                f"STORAGE_BACKEND must be one of {', '.join(BACKENDS)}, got {self.storage_backend!r}"
            )

        problems = []
        if self.uses_default_secret:
            problems.append("JWT_SECRET is not set or is a placeholder, using an insecure default secret")
        if self.storage_backend != "memory" and not self.database_url:
            problems.append(
                f"DATABASE_URL is not set, using the insecure default {INSECURE_DEFAULT_URLS[self.storage_backend]}"
            )

        if problems and self.is_production:
            raise InsecureConfigurationError("; ".join(problems))
        for problem in problems:
            logger.warning("[CONFIG] %s. Do not run this configuration in production.", problem)
        return self


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def get_settings() -> Settings:
    """Build the settings from the environment (and .env, if present)."""
    values = {
        "app_env": os.getenv("APP_ENV", "development"),
        "jwt_secret": os.getenv("JWT_SECRET") or INSECURE_DEFAULT_SECRET,
        "access_token_expire_minutes": os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"),
        "storage_backend": os.getenv("STORAGE_BACKEND", "memory").lower(),
        "database_url": os.getenv("DATABASE_URL") or None,
        "log_level": os.getenv("LOG_LEVEL", "INFO").upper(),
    }
    cors_origins = os.getenv("CORS_ORIGINS")
    if cors_origins:
        values["cors_origins"] = _split_csv(cors_origins)
    try:
        settings = Settings(**values)
    except ValidationError as exc:
        fields = ", ".join(str(err["loc"][0]).upper() for err in exc.errors())
        raise ConfigurationError(f"Invalid configuration value for {fields}") from exc
    return settings.check()
