from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Database
    database_url: str = "sqlite:///./nikkah.db"

    # JWT
    secret_key: str = "your-secret-key-change-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7  # 7 days

    # Frontend URL for CORS and email links
    frontend_url: str = "http://localhost:3000"

    # Public base URL of this API (signed photo links are built on it)
    app_base_url: str = "http://localhost:8001"

    # Profile photos: upload folder (empty = backend/uploads/photos)
    photo_upload_dir: str = ""
    # Signed photo URL expiry (minutes)
    photo_url_expire_minutes: int = 60

    # Resend email API (empty key = email notifications disabled, in-app only)
    resend_api_key: str = ""
    resend_api_url: str = "https://api.resend.com/emails"
    email_from: str = "NikkahFirst <info@nikkahfirst.com>"
    email_timeout_seconds: int = 10

    # Request quotas per allocation
    female_monthly_requests: int = 3
    monthly_plan_requests: int = 10
    annual_plan_requests: int = 15

    # Freemium members: distinct profiles per UTC day
    freemium_daily_profile_views: int = 5

    log_level: str = "INFO"

    class Config:
        env_file = ".env"


@lru_cache
def get_settings() -> Settings:
    return Settings()
