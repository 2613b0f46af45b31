from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    ENV: str = Field(default="dev")  # dev|prod
    TZ: str = Field(default="Asia/Tokyo")
    LOG_LEVEL: str = Field(default="INFO")

    # Security
    JWT_SECRET: str = Field(default="change-me")
    JWT_ALG: str = Field(default="HS256")
    JWT_EXPIRES_MIN: int = Field(default=60 * 24 * 7)

    # DB
    DATABASE_URL: str = Field(default="postgresql+psycopg://app:app@db:5432/app")

    # CORS
    CORS_ORIGINS: str = Field(default="http://localhost:3000,http://localhost")

    # Uploads
    MAX_UPLOAD_BYTES: int = Field(default=10 * 1024 * 1024)

    # Listing
    RECENT_WINDOW_DAYS: int = Field(default=7)
    PAGE_SIZE_DEFAULT: int = Field(default=20)
    PAGE_SIZE_MAX: int = Field(default=100)

    # Seed (dev)
    SEED_DEMO: bool = Field(default=True)
    DEMO_ADMIN_EMAIL: str = Field(default="admin@example.com")
    DEMO_DEPARTMENT_NAME: str = Field(default="Head Office")


settings = Settings()
