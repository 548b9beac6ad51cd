from typing import List, Union
from pydantic_settings import BaseSettings
from pydantic import field_validator


class Settings(BaseSettings):
    DATABASE_URL: str = "postgresql+asyncpg://postgres:root@db/postgres"
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_CONNECT_RETRIES: int = 3
    DB_CONNECT_RETRY_DELAY: float = 1.0
    CORS_ORIGINS: Union[str, List[str]] = ["http://localhost", "http://localhost:3000"]
    LOG_LEVEL: str = "INFO"
    JWT_SECRET_KEY: str = "your-secret-key-change-in-production"
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Budget defaults
    DEFAULT_CURRENCY: str = "USD"
    DEFAULT_WARNING_THRESHOLD: float = 80
    DEFAULT_APPROVAL_LIMIT: float = 1000

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",")]
        return v

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "ignore",
    }


settings = Settings()
