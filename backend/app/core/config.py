from pydantic_settings import BaseSettings
from pydantic import field_validator
from typing import List, Any
import json


def parse_cors_origins(value: Any) -> List[str]:
    """CORS origins given as a list, a JSON list string or a comma list"""
    if isinstance(value, list):
        return value
    if not isinstance(value, str):
        return []
    text = value.strip()
    if text.startswith('['):
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            text = text.strip('[]')
    return [origin.strip().strip('"\'') for origin in text.split(',') if origin.strip()]


class Settings(BaseSettings):
    """StudioTrack settings, read from the environment and `.env`"""

    # ==========================================
    # Application
    # ==========================================
    APP_NAME: str = "StudioTrack"
    ENVIRONMENT: str = "development"  # development | testing | production
    DEBUG: bool = True
    SECRET_KEY: str
    API_VERSION: str = "v1"
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8000

    # ==========================================
    # Database (sqlite:/// or postgresql:// get async drivers)
    # ==========================================
    DATABASE_URL: str
    DB_ECHO: bool = False
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20

    # ==========================================
    # Authentication
    # ==========================================
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    REFRESH_TOKEN_EXPIRE_DAYS: int = 30
    BCRYPT_ROUNDS: int = 12  # tests use 4

    # ==========================================
    # CORS
    # ==========================================
    CORS_ORIGINS_STR: str = "http://localhost:3000,http://127.0.0.1:3000"

    # ==========================================
    # Rate Limiting (slowapi / limits storage URI)
    # ==========================================
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_PER_MINUTE: int = 60
    RATE_LIMIT_STORAGE_URI: str = "memory://"

    # ==========================================
    # Logging
    # ==========================================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/app.log"  # empty disables the file handler

    # ==========================================
    # Studio Domain
    # ==========================================
    PROJECT_TYPE_CODE: str = "INT"  # 20250512-INT-AB12
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100
    ACTIVITY_FEED_LIMIT: int = 50

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

    @field_validator("PROJECT_TYPE_CODE")
    @classmethod
    def upper_type_code(cls, value: str) -> str:
        return value.strip().upper()

    @property
    def CORS_ORIGINS(self) -> List[str]:
        return parse_cors_origins(self.CORS_ORIGINS_STR)

    def is_dev_mode(self) -> bool:
        return self.ENVIRONMENT == "development" or self.DEBUG

    def clamp_page_size(self, page_size: int) -> int:
        """Keep list endpoints within 1..MAX_PAGE_SIZE"""
        return max(1, min(self.MAX_PAGE_SIZE, page_size))


settings = Settings()
