from pydantic_settings import BaseSettings
from typing import List, Any, Optional
from urllib.parse import quote_plus
import json


def parse_cors_origins(v: Any) -> List[str]:
    """Parse CORS origins from string or list"""
    if isinstance(v, list):
        return v
    if isinstance(v, str):
        # Try JSON parsing first
        if v.startswith('['):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                pass
        # Fall back to comma-separated
        return [origin.strip() for origin in v.split(',') if origin.strip()]
    return []


class Settings(BaseSettings):
    """Application settings - all configurable via environment variables"""

    # ==========================================
    # Application
    # ==========================================
    APP_NAME: str = "Campus Complaint & Meeting System"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    API_PREFIX: str = "/api"

    # Server Configuration
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 5000

    # ==========================================
    # Database
    # ==========================================
    # DATABASE_URL wins when set, otherwise the URL is built from the DB_* parts
    DATABASE_URL: Optional[str] = None
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_USER: str = "postgres"
    DB_PASSWORD: str = ""
    DB_NAME: str = "school_complaint_system"
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 0
    DB_POOL_TIMEOUT: int = 30
    DB_ECHO: bool = False

    # Startup connectivity check
    DB_CONNECT_TIMEOUT: float = 5.0  # seconds per attempt
    DB_CONNECT_RETRIES: int = 3
    DB_RETRY_DELAY: float = 2.0  # seconds between attempts

    # ==========================================
    # Authentication
    # ==========================================
    JWT_SECRET_KEY: str = "CHANGE_ME"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440  # 24 hours
    BCRYPT_ROUNDS: int = 12

    # ==========================================
    # CORS (stored as comma-separated string, parsed to list)
    # ==========================================
    CORS_ORIGINS_STR: str = "http://localhost:3000"

    @property
    def CORS_ORIGINS(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        return parse_cors_origins(self.CORS_ORIGINS_STR)

    # ==========================================
    # Request limits
    # ==========================================
    MAX_REQUEST_SIZE: int = 10485760  # 10MB
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT: str = "100/15 minutes"
    # memory:// keeps counters per process, use redis://host:6379/0 when running several workers
    RATE_LIMIT_STORAGE_URI: str = "memory://"

    # ==========================================
    # Logging
    # ==========================================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/app.log"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env that aren't defined in Settings

    @property
    def SQLALCHEMY_DATABASE_URL(self) -> str:
        """Database URL used by the async engine"""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        password = f":{quote_plus(self.DB_PASSWORD)}" if self.DB_PASSWORD else ""
        return (
            f"postgresql+asyncpg://{self.DB_USER}{password}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )

    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"


settings = Settings()
