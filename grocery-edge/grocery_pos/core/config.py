from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    DB_URL: str = "sqlite+aiosqlite:///./grocery_pos.db"
    LOG_LEVEL: str = "INFO"

    TERMINAL_ID: str = "TERMINAL-1"
    CASHIER_ID: str = "DEFAULT_CASHIER"

    # pricing
    TAX_RATE: float = 0.15
    MAX_LINE_QUANTITY: int = 999
    MAX_DISCOUNT_PERCENT: float = 50
    LOW_STOCK_THRESHOLD: int = 10

    # offline sync
    SYNC_API_URL: Optional[str] = None
    SYNC_TIMEOUT_SECONDS: float = 10.0
    SYNC_MAX_ATTEMPTS: int = 3
    SYNC_RETRY_DELAY_SECONDS: float = 1.5
    SYNC_RETENTION_DAYS: int = 7
    START_ONLINE: bool = True


settings = Settings()
