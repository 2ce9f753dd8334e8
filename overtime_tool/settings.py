from decimal import Decimal
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from overtime_tool.models import AmountDisplay, CalculationParams, OvertimeConfig


class Settings(BaseSettings):
    daily_threshold: Decimal = Decimal("8")
    overtime_multiplier: Decimal = Decimal("1.5")
    tier2_threshold_hours: Decimal = Decimal("0")
    tier2_multiplier: Decimal = Decimal("2.0")
    amount_display: AmountDisplay = AmountDisplay.EARNED
    log_level: str = "INFO"
    log_json: bool = False
    allowed_origins: str = "http://localhost:8080,http://localhost:3000,http://127.0.0.1:8080"
    offload_enabled: bool = False
    offload_workers: int = 1

    model_config = SettingsConfigDict(
        env_prefix="OVERTIME_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def default_params(self) -> CalculationParams:
        return CalculationParams(
            daily_threshold=self.daily_threshold,
            overtime_multiplier=self.overtime_multiplier,
            tier2_threshold_hours=self.tier2_threshold_hours,
            tier2_multiplier=self.tier2_multiplier,
        )

    def default_config(self) -> OvertimeConfig:
        return OvertimeConfig(amount_display=self.amount_display)


@lru_cache
def get_settings() -> Settings:
    return Settings()


def get_allowed_origins() -> list[str]:
    raw = get_settings().allowed_origins
    return [origin.strip() for origin in raw.split(",") if origin.strip()]
