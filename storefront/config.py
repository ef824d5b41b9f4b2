# storefront/config.py
from decimal import Decimal
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"


class Settings(BaseSettings):
    SECRET_KEY: str = "dev-secret-change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    DATABASE_URL: str = "sqlite:///./storefront.db"

    FRONTEND_URL: Optional[str] = None
    LOG_LEVEL: str = "INFO"

    # Pricing rules applied at checkout
    TAX_RATE: Decimal = Decimal("0")
    SHIPPING_FLAT_RATE: Decimal = Decimal("0")
    # Orders at or above this subtotal ship for free (0 disables the rule)
    FREE_SHIPPING_THRESHOLD: Decimal = Decimal("0")
    CURRENCY: str = "USD"

    model_config = SettingsConfigDict(env_file=str(env_path), extra="ignore")


settings = Settings()
