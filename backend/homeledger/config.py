"""Application configuration settings."""

from decimal import Decimal
from pathlib import Path
from pydantic import BaseModel
from pydantic_settings import BaseSettings


class HouseholdMember(BaseModel):
    """A person sharing the household finances."""

    email: str
    name: str


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = "sqlite:///./data/homeledger.db"
    data_dir: Path = Path("data")

    # Server
    cors_origins: list[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]
    log_level: str = "INFO"

    # Display
    currency_symbol: str = "£"

    # Alerts
    high_apr_threshold: Decimal = Decimal("20")
    promo_alert_days: int = 90
    payment_due_alert_days: int = 14
    renewal_alert_days: int = 30

    # Projections
    projection_months: int = 240

    # UK savings tax (basic rate taxpayer)
    savings_allowance: Decimal = Decimal("1000")
    savings_tax_rate: Decimal = Decimal("0.20")
    isa_tax_free_cap: Decimal = Decimal("20000")
    isa_name_keywords: list[str] = ["isa"]

    # Household
    household_members: list[HouseholdMember] = []

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()

# Ensure directories exist
settings.data_dir.mkdir(parents=True, exist_ok=True)
