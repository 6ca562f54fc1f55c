"""Application configuration via environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Database
    database_url: str

    # Redis
    redis_url: str

    # App
    log_level: str = "INFO"
    environment: str = "development"
    local_timezone: str = "Asia/Almaty"  # "today" and the daily request sequence
    frontend_url: str = "http://localhost:3000"

    # Public submissions
    request_rate_limit: int = 10
    request_rate_window_minutes: int = 60

    # Sessions
    session_ttl_seconds: int = 86400  # 24 hours

    # Document storage (S3 compatible)
    s3_bucket: str = "documents"
    s3_endpoint_url: str = ""
    s3_region: str = "eu-central-1"
    s3_access_key_id: str = ""
    s3_secret_access_key: str = ""
    s3_public_base_url: str = ""  # e.g. "https://cdn.example.kz/documents"
    document_max_bytes: int = 20 * 1024 * 1024

    # Email (AWS SES)
    ses_region: str = ""
    email_from: str = "noreply@jurist.kz"
    admin_email: str = ""

    # Telegram admin channel
    admin_telegram_bot_token: str = ""
    admin_telegram_chat_id: str = ""

    # Notification worker
    notification_queue_key: str = "notifications:outbound"
    notification_max_attempts: int = 3
    notification_poll_timeout: int = 5

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()  # type: ignore[call-arg]
