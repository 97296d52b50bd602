#config.py
import os
from pydantic_settings import BaseSettings
from pydantic import Field
from pydantic_settings import SettingsConfigDict
from typing import List
from functools import lru_cache

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore", populate_by_name=True)
    # Application Settings
    APP_NAME: str = "SalonFlow Booking API"
    APP_VERSION: str = "1.0.0"
    ENV: str = "production"
    DOCS_ENABLED: bool = True

    # Server Settings
    HOST: str = "0.0.0.0"
    PORT: int = int(os.environ.get("PORT", 8000))

    # Database Settings
    DATABASE_URL: str = "sqlite:///./salonflow.db"

    # Security Settings
    SECRET_KEY: str = Field(default="change-me-in-prod", alias="JWT_SECRET_KEY")
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    REFRESH_TOKEN_EXPIRE_DAYS: int = 30
    # Server-side secret the phone-derived sign-in password is built from
    IDENTITY_SERVICE_SECRET: str = "change-me-in-prod"

    # CORS Settings (comma-separated)
    ALLOWED_ORIGINS: str = "*"

    # SMS Settings
    SMS_PROVIDER: str = "textlk"
    TEXTLK_API_TOKEN: str = ""
    TEXTLK_SENDER_ID: str = "TextLKDemo"
    TEXTLK_API_URL: str = "https://app.text.lk/api/v3/sms/send"
    TWILIO_ACCOUNT_SID: str = ""
    TWILIO_AUTH_TOKEN: str = ""
    TWILIO_PHONE_NUMBER: str = ""
    SMS_TIMEOUT_SECONDS: float = 15.0

    # OTP Settings
    OTP_LENGTH: int = 6
    OTP_TTL_MINUTES: int = 5
    OTP_RESEND_COOLDOWN_SECONDS: int = 60
    OTP_MAX_ATTEMPTS: int = 3

    # Outer-surface limit on /otp/send per client IP
    OTP_SEND_MAX_PER_IP: int = 10
    OTP_SEND_WINDOW_SECONDS: int = 600

    # Business calendar
    SLOT_INTERVAL_MINUTES: int = 30
    BUSINESS_DAY_START: str = "09:00"
    BUSINESS_DAY_END: str = "18:00"
    BOOKING_WINDOW_DAYS: int = 30

    # Logging Settings
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @property
    def is_production(self) -> bool:
        return self.ENV.strip().lower() == "production"

    @property
    def DEBUG(self) -> bool:
        return not self.is_production

    # Accept comma-separated strings for list envs
    def _split_csv(self, value: str) -> List[str]:
        if value is None:
            return []
        value = value.strip()
        if value == "":
            return []
        return [item.strip() for item in value.split(",")]

    @property
    def allowed_origins_list(self) -> List[str]:
        return self._split_csv(self.ALLOWED_ORIGINS)


@lru_cache()
def get_settings() -> Settings:
    return Settings()

settings: Settings = get_settings()
