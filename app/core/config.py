from pydantic_settings import BaseSettings
from typing import List
from pathlib import Path


class Settings(BaseSettings):
    # Database - local sqlite file by default, override with DATABASE_URL for Postgres
    DATABASE_URL: str = "sqlite:///./preorder_app.db"

    # Shopify app credentials (supply via environment)
    SHOPIFY_API_KEY: str
    SHOPIFY_API_SECRET: str
    SHOPIFY_APP_URL: str = "http://localhost:8000"
    SHOPIFY_API_VERSION: str = "2025-07"
    SHOPIFY_SCOPES: str = "read_products,read_inventory"
    SHOPIFY_HTTP_TIMEOUT_SECONDS: float = 10.0

    # Billing: charges are created in test mode unless explicitly disabled
    SHOPIFY_BILLING_TEST: bool = True
    BILLING_UPGRADE_PATH: str = "/app/billing?upgrade_required=true"
    BILLING_SUCCESS_PATH: str = "/app?billing=success"
    BILLING_FAILURE_PATH: str = "/app/billing?error=activation_failed"

    # Celery / Redis
    REDIS_URL: str = "redis://localhost:6379"
    CELERY_TASK_ALWAYS_EAGER: bool = False

    # App Settings
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "https://admin.shopify.com",
    ]

    class Config:
        env_file = Path(__file__).parent.parent.parent / ".env"
        env_file_encoding = 'utf-8'


settings = Settings()
