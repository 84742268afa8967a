# automart/core/config.py
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./automart.db"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    JWT_ACCESS_SECRET: str = "change-this-secret"
    JWT_REFRESH_SECRET: str = "change-this-refresh-secret"
    JWT_ALG: str = "HS256"

    ACCESS_TOKEN_EXPIRE_MINUTES: int = 120
    REFRESH_TOKEN_EXPIRE_DAYS: int = 14

    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5000",
    ]

    # requests per window, window in seconds
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_WINDOW_SECONDS: int = 60
    RATE_LIMIT_STANDARD: int = 100
    RATE_LIMIT_AUTH: int = 10
    RATE_LIMIT_PUBLIC_LISTINGS: int = 300

    FREE_TIER_LISTING_LIMIT: int = 3

    PLACEHOLDER_LOGO: str = "https://betterplaceholder.com/400x400?text=Logo&bg_color=122B45&text_color=ffffff"
    PLACEHOLDER_HEADER: str = "https://betterplaceholder.com/1200x400?text=Welcome&bg_color=122B45&text_color=ffffff"
    PLACEHOLDER_CAR_IMAGE: str = "https://betterplaceholder.com/800x450?text=Car+Image&bg_color=122B45&text_color=ffffff"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"


settings = Settings()
