"""Application settings loaded from environment variables.

Defines all environment-driven configuration used by the app.
"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Typed configuration model for the application."""

    # Database configuration
    DATABASE_URL: str

    # Credentials
    JWT_SECRET: str
    JWT_EXPIRES_IN_DAYS: int = 7
    JWT_ISSUER: str = "mireb-api"
    JWT_AUDIENCE: str = "mireb-app"
    BCRYPT_ROUNDS: int = 12

    # Listing parameters
    MAX_PAGE_SIZE: int = 100

    # Seed administrator
    DEFAULT_ADMIN_EMAIL: Optional[str] = None
    DEFAULT_ADMIN_PASSWORD: Optional[str] = None
    DEFAULT_ADMIN_NAME: str = "Administrateur Mireb"

    # API parameters
    ENVIRONMENT: str = "development"
    ROOT_PATH_BACKEND: str = ""
    ALLOWED_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5500",
        "http://localhost:8080",
    ]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()  # type: ignore[call-arg]
