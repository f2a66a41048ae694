"""
Core configuration module using Pydantic Settings.
Supports environment variables and .env files.
"""
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="allow"
    )

    # Application
    app_name: str = Field(default="Warehouse Management", alias="APP_NAME")
    app_version: str = Field(default="1.0.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")

    # Database
    database_url: str = Field(
        default="sqlite:///./data/warehouse.db",
        alias="DATABASE_URL"
    )
    db_echo: bool = Field(default=False, alias="DB_ECHO")
    db_pool_size: int = Field(default=10, alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=20, alias="DB_MAX_OVERFLOW")

    # JWT Authentication
    jwt_secret_key: str = Field(
        default="your-secret-key-change-this-in-production",
        alias="JWT_SECRET_KEY"
    )
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    jwt_access_token_expire_minutes: int = Field(default=30, alias="JWT_ACCESS_TOKEN_EXPIRE_MINUTES")
    jwt_refresh_token_expire_days: int = Field(default=7, alias="JWT_REFRESH_TOKEN_EXPIRE_DAYS")

    # Security
    min_password_length: int = Field(default=6, alias="MIN_PASSWORD_LENGTH")
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        alias="CORS_ORIGINS"
    )

    # Object storage (item images)
    storage_dir: str = Field(default="./data/storage", alias="STORAGE_DIR")
    storage_bucket: str = Field(default="inventory-images", alias="STORAGE_BUCKET")
    storage_public_url: str = Field(default="/storage", alias="STORAGE_PUBLIC_URL")
    max_image_size: int = Field(default=5 * 1024 * 1024, alias="MAX_IMAGE_SIZE")  # 5MB
    allowed_image_types: set[str] = Field(
        default={"image/jpeg", "image/jpg", "image/png", "image/webp"},
        alias="ALLOWED_IMAGE_TYPES"
    )

    # Inventory
    default_uom: str = Field(default="PCS", alias="DEFAULT_UOM")
    default_category: str = Field(default="General", alias="DEFAULT_CATEGORY")
    history_limit: int = Field(default=500, alias="HISTORY_LIMIT")
    transactions_page_size: int = Field(default=10, alias="TRANSACTIONS_PAGE_SIZE")
    opname_page_size: int = Field(default=50, alias="OPNAME_PAGE_SIZE")
    dashboard_activity_days: int = Field(default=7, alias="DASHBOARD_ACTIVITY_DAYS")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_dir: str = Field(default="./logs", alias="LOG_DIR")
    log_max_bytes: int = Field(default=10 * 1024 * 1024, alias="LOG_MAX_BYTES")  # 10MB
    log_backup_count: int = Field(default=5, alias="LOG_BACKUP_COUNT")

    # Rate Limiting
    rate_limit_enabled: bool = Field(default=True, alias="RATE_LIMIT_ENABLED")
    rate_limit_per_minute: int = Field(default=100, alias="RATE_LIMIT_PER_MINUTE")

    # Initial administrator, created on startup when the users table is empty
    bootstrap_admin_email: Optional[str] = Field(default=None, alias="BOOTSTRAP_ADMIN_EMAIL")
    bootstrap_admin_password: Optional[str] = Field(default=None, alias="BOOTSTRAP_ADMIN_PASSWORD")


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Dependency injection for FastAPI."""
    return settings
