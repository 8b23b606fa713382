from pydantic_settings import BaseSettings
from pydantic import Field, AliasChoices
from pathlib import Path
from dotenv import load_dotenv

# Repository root (3 levels up from this file: workforce_service/core/config.py)
PROJECT_ROOT = Path(__file__).parent.parent.parent
ENV_FILE = PROJECT_ROOT / ".env"

# Load .env file from the repository root
if ENV_FILE.exists():
    load_dotenv(ENV_FILE)


class Settings(BaseSettings):
    """Application settings"""

    # Service info
    service_name: str = "workforce"
    service_version: str = "0.1.0"
    service_port: int = 8006
    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # Database settings - HOST, PORT, USER, PASSWORD from env
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_USER: str = "postgres"
    DB_PASSWORD: str = "postgres"
    DB_NAME: str = "workforce_service_db"

    # Full URL override (tests point this at SQLite)
    database_url_override: str = Field(
        default="",
        validation_alias=AliasChoices("DATABASE_URL", "database_url_override")
    )

    @property
    def DATABASE_URL(self) -> str:
        """Construct async database URL"""
        if self.database_url_override:
            return self.database_url_override
        return f"postgresql+asyncpg://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    # JWT settings
    jwt_secret: str = Field(
        default="change-me-in-production",
        validation_alias=AliasChoices("JWT_SECRET", "jwt_secret")
    )
    jwt_algorithm: str = "HS256"
    jwt_expiry_minutes: int = Field(
        default=1440,
        validation_alias=AliasChoices("JWT_EXPIRY_MINUTES", "jwt_expiry_minutes")
    )

    # Manual activation confirmation tokens
    activation_confirm_ttl_minutes: int = 10

    # Email service (for invitation mails)
    EMAIL_SERVICE_URL: str = "http://localhost:8005"
    email_delivery_enabled: bool = Field(
        default=False,
        validation_alias=AliasChoices("EMAIL_DELIVERY_ENABLED", "email_delivery_enabled")
    )

    # Frontend (login entry point and invitation links)
    FRONTEND_URL: str = "http://localhost:3000"
    LOGIN_PATH: str = "/login"

    # Employment -> account coupling
    SUSPEND_ACCOUNT_ON_TERMINATION: bool = True

    # First super admin, created at startup when both are set
    bootstrap_admin_email: str = Field(
        default="",
        validation_alias=AliasChoices("BOOTSTRAP_ADMIN_EMAIL", "bootstrap_admin_email")
    )
    bootstrap_admin_password: str = Field(
        default="",
        validation_alias=AliasChoices("BOOTSTRAP_ADMIN_PASSWORD", "bootstrap_admin_password")
    )

    class Config:
        env_file = str(ENV_FILE) if ENV_FILE.exists() else None
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


settings = Settings()
