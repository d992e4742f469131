from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional

class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./excursions.db"

    # Payment gateway (Razorpay)
    RAZORPAY_KEY_ID: str = ""
    RAZORPAY_KEY_SECRET: str = ""
    PAYMENT_CURRENCY: str = "INR"
    GATEWAY_TIMEOUT_SECONDS: float = 10.0

    # Admin
    ADMIN_SECRET_KEY: str = ""

    # Email notifications
    RESEND_API_KEY: Optional[str] = None
    EMAIL_FROM: str = "Infinity Trekkers <bookings@infinitytrekkers.com>"
    ADMIN_EMAIL: Optional[str] = None
    EMAIL_ENABLED: bool = True

    # Booking cleanup job (daily, local server time)
    CLEANUP_ENABLED: bool = True
    CLEANUP_HOUR: int = 2
    CLEANUP_MINUTE: int = 0

    # Application
    PROJECT_NAME: str = "Infinity Trekkers Booking Service"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["http://localhost:5173", "https://infinity-trekkers.vercel.app"]

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

settings = Settings()
