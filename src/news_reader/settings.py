from pydantic_settings import BaseSettings, SettingsConfigDict

from .config import CACHE_TTL, DEFAULT_LANGUAGE, DEFAULT_SORT_BY, HTTP_TIMEOUT, NEWS_API_URL


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    NEWS_API_KEY: str | None = None
    NEWS_API_BASE_URL: str = NEWS_API_URL
    NEWS_LANGUAGE: str = DEFAULT_LANGUAGE
    NEWS_SORT_BY: str = DEFAULT_SORT_BY

    CACHE_TTL_SECONDS: int = CACHE_TTL
    CACHE_MAX_ENTRIES: int = 1
    UPSTREAM_TIMEOUT_SECONDS: float = HTTP_TIMEOUT

    UPLOAD_DIR: str = "uploads"
    MAX_UPLOAD_BYTES: int = 50 * 1024 * 1024

    API_HOST: str = "0.0.0.0"
    API_PORT: int = 3001


settings = Settings()
