from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    All settings can be configured via .env file or environment variables.
    """

    # =============================================================================
    # APPLICATION
    # =============================================================================
    PROJECT_NAME: str = "School Records"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # =============================================================================
    # SQLITE DATABASE (default store)
    # =============================================================================
    SQLITE_PATH: str = "./school.db"

    # =============================================================================
    # POSTGRESQL DATABASE - Individual components
    # =============================================================================
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_HOST: str = ""
    POSTGRES_PORT: str = "5432"
    POSTGRES_DB: str = "school_db"

    # Database URL - set it directly, or it is built from the fields above
    DATABASE_URL: Optional[str] = Field(default=None, validate_default=True)

    # =============================================================================
    # DATABASE POOL SETTINGS (ignored for SQLite)
    # =============================================================================
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 3600
    DB_ECHO_SQL: bool = False

    # =============================================================================
    # LOGGING
    # =============================================================================
    LOG_LEVEL: str = "INFO"

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def build_database_url(cls, v: Optional[str], info) -> str:
        """
        Build DATABASE_URL from components if not provided.

        Priority:
        1. Use DATABASE_URL if explicitly set in .env
        2. Build from POSTGRES_* components when POSTGRES_HOST is set
        3. Fall back to the SQLite file at SQLITE_PATH
        """
        if isinstance(v, str) and v:
            return v

        host = info.data.get("POSTGRES_HOST")
        if host:
            user = info.data.get("POSTGRES_USER")
            password = info.data.get("POSTGRES_PASSWORD")
            port = info.data.get("POSTGRES_PORT")
            db = info.data.get("POSTGRES_DB")
            return f"postgresql://{user}:{password}@{host}:{port}/{db}"

        return f"sqlite:///{info.data.get('SQLITE_PATH')}"

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )


# Create global settings instance
settings = Settings()


def print_config():
    """Print current configuration (hide sensitive data)."""
    print("=" * 80)
    print("📋 CURRENT CONFIGURATION")
    print("=" * 80)
    print(f"Project Name: {settings.PROJECT_NAME}")
    print(f"Version: {settings.APP_VERSION}")
    print(f"Debug Mode: {settings.DEBUG}")
    print("-" * 80)
    url = settings.DATABASE_URL
    if settings.POSTGRES_PASSWORD:
        url = url.replace(settings.POSTGRES_PASSWORD, "***")
    print(f"Database URL: {url}")
    if not settings.is_sqlite:
        print(f"Database Password: {'*' * len(settings.POSTGRES_PASSWORD)}")
        print(f"Pool Size: {settings.DB_POOL_SIZE}")
        print(f"Max Overflow: {settings.DB_MAX_OVERFLOW}")
    print(f"Echo SQL: {settings.DB_ECHO_SQL}")
    print(f"Log Level: {settings.LOG_LEVEL}")
    print("=" * 80)


if __name__ == "__main__":
    print_config()
