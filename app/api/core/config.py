import os
from pathlib import Path

from decouple import Config, RepositoryEnv
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = next(p for p in Path(__file__).resolve().parents if (p / "main.py").exists())

# Determine which env file to load
env_file = os.getenv("ENV_FILE", ".env")
env_path = PROJECT_ROOT / env_file

# Only use RepositoryEnv if the env file exists
if env_path.exists():
    config = Config(RepositoryEnv(env_path))
else:
    # fallback: read directly from os.environ using decouple's AutoConfig
    from decouple import AutoConfig

    config = AutoConfig(search_path=None)


class Settings(BaseSettings):
    # App general
    DEBUG: bool = config("DEBUG", default=False, cast=bool)
    APP_NAME: str = config("APP_NAME", default="HELPDESK")
    APP_VERSION: str = config("APP_VERSION", default="1.0.0")
    ENVIRONMENT: str = config("ENVIRONMENT", default="dev")
    APP_PORT: int = config("APP_PORT", default=8000, cast=int)
    APP_URL: str = config("APP_URL", default="https://helpdesk.example.com")
    DEV_URL: str = config("DEV_URL", default="http://localhost:5173")

    # Database
    DB_TYPE: str = config("DB_TYPE", default="sqlite")
    DB_HOST: str = config("DB_HOST", default="localhost")
    DB_PORT: int = config("DB_PORT", default=5432, cast=int)
    DB_USER: str = config("DB_USER", default="user")
    DB_PASS: str = config("DB_PASS", default="password")
    DB_NAME: str = config("DB_NAME", default="helpdesk")
    DB_ECHO: bool = config("DB_ECHO", default=False, cast=bool)

    # JWT Authentication
    JWT_SECRET: str = config("JWT_SECRET", default="your-super-secret-jwt-key-change-in-production")
    JWT_ALGORITHM: str = config("JWT_ALGORITHM", default="HS256")
    JWT_EXPIRY_HOURS: int = config("JWT_EXPIRY_HOURS", default=24, cast=int)

    # Seed data
    ADMIN_EMAIL: str = config("ADMIN_EMAIL", default="admin@example.com")
    ADMIN_PASSWORD: str = config("ADMIN_PASSWORD", default="admin12345")
    DEFAULT_DEPARTMENTS: str = config(
        "DEFAULT_DEPARTMENTS", default="IT,Finance,HR,Operations"
    )

    # Tickets
    DEFAULT_PAGE_SIZE: int = config("DEFAULT_PAGE_SIZE", default=20, cast=int)
    MAX_PAGE_SIZE: int = config("MAX_PAGE_SIZE", default=100, cast=int)
    TICKET_NUMBER_MAX_ATTEMPTS: int = config("TICKET_NUMBER_MAX_ATTEMPTS", default=5, cast=int)

    @property
    def DEPARTMENT_NAMES(self) -> list[str]:
        """Return the configured seed departments, blanks removed.

        Examples:
            >>> Settings(DEFAULT_DEPARTMENTS="IT, HR,").DEPARTMENT_NAMES
            ['IT', 'HR']
        """

        return [name.strip() for name in self.DEFAULT_DEPARTMENTS.split(",") if name.strip()]

    model_config = SettingsConfigDict(extra="allow")


settings = Settings()
