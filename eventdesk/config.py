"""Application configuration settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "EventDesk Reporting API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    DB_HOST: str = "localhost"
    DB_PORT: int = 3306
    DB_USER: str = "root"
    DB_PASSWORD: str = "password"
    DB_NAME: str = "eventdesk"
    DB_ECHO: bool = False

    # Store access
    STORE_TIMEOUT_SECONDS: float = 10.0
    STORE_RETRY_ATTEMPTS: int = 3
    STORE_RETRY_DELAY_MS: int = 200

    # Redis (disabled: utilization cache writes run without the lock)
    REDIS_ENABLED: bool = True
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_PASSWORD: str | None = None
    REDIS_DB: int = 0

    # Distributed Lock settings
    LOCK_TIMEOUT_SECONDS: int = 30
    LOCK_RETRY_DELAY_MS: int = 100
    LOCK_MAX_RETRIES: int = 50

    # Reporting
    ALL_TIME_FLOOR_YEAR: int = 2000
    AUDITORIUM_HOURS_AVAILABLE: float = 24.0
    PDF_AUTHOR: str = "EventDesk"

    # Utilization cache refresh
    UTILIZATION_REFRESH_ENABLED: bool = True
    UTILIZATION_REFRESH_INTERVAL_SECONDS: int = 3600

    @property
    def database_url(self) -> str:
        """Get async database URL."""
        return (
            f"mysql+aiomysql://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )

    @property
    def redis_url(self) -> str:
        """Get Redis URL."""
        if self.REDIS_PASSWORD:
            return f"redis://:{self.REDIS_PASSWORD}@{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
