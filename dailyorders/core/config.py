"""Application configuration."""

from os import getenv

from pydantic import BaseModel


class Settings(BaseModel):
    """Runtime settings for the application."""

    app_name: str = "dailyorders API"
    app_env: str = getenv("APP_ENV", "dev")
    debug: bool = getenv("DEBUG", "0") == "1"
    log_level: str = getenv("LOG_LEVEL", "INFO")
    database_url: str = getenv("DATABASE_URL", "sqlite:///./dailyorders.db")
    store_timezone: str = getenv("STORE_TIMEZONE", "Asia/Seoul")
    default_business_start_time: str = getenv("DEFAULT_BUSINESS_START_TIME", "09:00")
    default_order_cutoff_time: str = getenv("DEFAULT_ORDER_CUTOFF_TIME", "15:00")
    restock_on_cancel: bool = getenv("RESTOCK_ON_CANCEL", "1") == "1"
    owner_notification_webhook_url: str = getenv("OWNER_NOTIFICATION_WEBHOOK_URL", "")
    notification_max_attempts: int = int(getenv("NOTIFICATION_MAX_ATTEMPTS", "3"))
    notification_timeout_seconds: float = float(getenv("NOTIFICATION_TIMEOUT_SECONDS", "5"))
    notification_retry_backoff_seconds: float = float(getenv("NOTIFICATION_RETRY_BACKOFF_SECONDS", "0.5"))
    seed_demo_data: bool = getenv("SEED_DEMO_DATA", "0") == "1"


settings: Settings = Settings()
