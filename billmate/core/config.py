# billmate/core/config.py
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic_settings import BaseSettings
from pydantic import validator
from typing import List


DEFAULT_RECEIPT_TEMPLATE = (
    "🧾 *{shop_name}*\n──────────────\n{items}\n──────────────\n"
    "*Total: {currency}{total}*\nPayment: {payment_method}\nDate: {date}\n\n"
    "Thank you for shopping with us! 🙏"
)


class Settings(BaseSettings):
    """Application settings loaded from .env"""

    # === Database ===
    DATABASE_URL: str = "sqlite+aiosqlite:///./billmate.db"
    DATABASE_ECHO: bool = False

    # === CORS ===
    ALLOWED_ORIGINS: List[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]
    ALLOWED_METHODS: List[str] = ["*"]
    ALLOWED_HEADERS: List[str] = ["*"]

    # === System ===
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    LOG_TO_FILE: bool = True
    TIMEZONE: str = "Asia/Kolkata"

    @validator("TIMEZONE")
    def validate_timezone(cls, v):
        """Reject unknown IANA zone names at startup"""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone: {v}")
        return v

    # === Shop defaults ===
    DEFAULT_SHOP_NAME: str = "My Shop"
    DEFAULT_CURRENCY: str = "₹"
    DEFAULT_LOW_STOCK_THRESHOLD: int = 5
    DEFAULT_RECEIPT_TEMPLATE: str = DEFAULT_RECEIPT_TEMPLATE

    # === Smart alerts ===
    ALERT_BADGE_REFRESH_ENABLED: bool = True
    ALERT_BADGE_REFRESH_SECONDS: float = 60.0
    ALERT_EVALUATOR_TIMEOUT_SECONDS: float = 5.0
    NO_SALES_ALERT_HOUR: int = 10

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.TIMEZONE)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


# Create a global settings instance
settings = Settings()
