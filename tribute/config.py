from datetime import date
from functools import lru_cache
from typing import List, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Milestone(BaseModel):
    title: str
    happened_on: Optional[date] = None
    text: str = "A precious memory that will always stay with me"


DEFAULT_TIMELINE = [
    Milestone(title="The day we met"),
    Milestone(title="Our first date"),
    Milestone(title="Adventures together"),
    Milestone(title="Beautiful moments"),
]


class Settings(BaseSettings):
    database_url: str = Field("sqlite+aiosqlite:///./tribute.db", alias="DATABASE_URL")
    cors_origins: str = Field("*", alias="CORS_ORIGINS")

    # Redemption policy
    preferred_time_required: bool = Field(True, alias="PREFERRED_TIME_REQUIRED")
    default_delivery_address: Optional[str] = Field(None, alias="DEFAULT_DELIVERY_ADDRESS")
    catalog_path: str = Field("configs/catalog.yaml", alias="CATALOG_PATH")
    initial_balance: int = Field(500, alias="INITIAL_BALANCE")

    # Notifications
    notification_channel: str = Field("email", alias="NOTIFICATION_CHANNEL")
    notify_function_url: Optional[str] = Field(None, alias="NOTIFY_FUNCTION_URL")
    notification_timeout_seconds: float = Field(10.0, alias="NOTIFICATION_TIMEOUT_SECONDS")

    resend_api_key: Optional[str] = Field(None, alias="RESEND_API_KEY")
    resend_api_url: str = Field("https://api.resend.com", alias="RESEND_API_URL")
    resend_from: str = Field("Gift Orders <onboarding@resend.dev>", alias="RESEND_FROM")
    notification_email: Optional[str] = Field(None, alias="NOTIFICATION_EMAIL")

    whatsapp_access_token: Optional[str] = Field(None, alias="WHATSAPP_ACCESS_TOKEN")
    whatsapp_to_number: Optional[str] = Field(None, alias="WHATSAPP_TO_NUMBER")
    whatsapp_phone_number_id: Optional[str] = Field(None, alias="WHATSAPP_PHONE_NUMBER_ID")
    whatsapp_api_base: str = Field("https://graph.facebook.com/v17.0", alias="WHATSAPP_API_BASE")

    # Page
    page_title: str = Field("To My Dearest", alias="PAGE_TITLE")
    timeline: List[Milestone] = Field(default_factory=lambda: list(DEFAULT_TIMELINE), alias="TIMELINE")

    log_level: str = Field("INFO", alias="LOG_LEVEL")
    debug: bool = Field(False, alias="DEBUG")
    env: str = Field("prod", alias="ENV")

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
