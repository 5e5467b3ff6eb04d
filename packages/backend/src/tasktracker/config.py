"""Application configuration via environment variables.

Uses pydantic-settings to load config from env vars with TASKTRACKER_ prefix.
No YAML files, no file-based config — just env vars (12-factor app style).

Learn: The database URL and the JWT signing secret have no defaults.
Constructing Settings without them raises a ValidationError, so a
misconfigured deployment dies at startup instead of on the first request.
Settings are built once in create_app() and handed to whatever needs them;
request-handling code never reads the environment itself.
"""

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings

MIN_PRODUCTION_SECRET_LENGTH = 32


class Settings(BaseSettings):
    """All app configuration. Set via TASKTRACKER_* env vars."""

    # Database
    database_url: str
    db_pool_size: int = 5
    db_pool_timeout: float = 30.0

    # Auth
    jwt_secret: SecretStr
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60

    # Server
    environment: str = "development"
    debug: bool = False
    host: str = "127.0.0.1"
    port: int = 8080

    # CORS
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]

    model_config = {"env_prefix": "TASKTRACKER_"}

    @model_validator(mode="after")
    def validate_secret(self):
        """Reject empty secrets everywhere and short ones outside development."""
        secret = self.jwt_secret.get_secret_value()
        if not secret:
            raise ValueError("TASKTRACKER_JWT_SECRET must not be empty")
        if (
            self.environment != "development"
            and len(secret) < MIN_PRODUCTION_SECRET_LENGTH
        ):
            raise ValueError(
                "TASKTRACKER_JWT_SECRET must be at least "
                f"{MIN_PRODUCTION_SECRET_LENGTH} characters in non-development "
                "environments. Generate one with: "
                'python -c "import secrets; print(secrets.token_urlsafe(32))"'
            )
        if self.db_pool_size < 1:
            raise ValueError("TASKTRACKER_DB_POOL_SIZE must be at least 1")
        return self


def load_settings() -> Settings:
    """Build settings from the process environment (startup only)."""
    return Settings()
