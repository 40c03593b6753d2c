"""Application settings and shared constants."""

from functools import lru_cache
from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Lumina Production ERP"
    database_url: str = "sqlite:///./lumina_erp.db"
    safety_stock_factor: float = 1.2
    purchase_projection_days: int = 30
    low_stock_factor: float = 1.5
    dashboard_top_n: int = 5
    log_level: str = "INFO"
    log_json: bool = False

    class Config:
        env_file = ".env"
        case_sensitive = False

    @field_validator("safety_stock_factor", "low_stock_factor")
    @classmethod
    def validate_factor(cls, v: float) -> float:
        if v < 0:
            raise ValueError("stock factors must be zero or positive")
        return v

    @field_validator("purchase_projection_days", "dashboard_top_n")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be positive")
        return v


def minutes_to_hours(value_minutes: float) -> float:
    return value_minutes / 60.0


def percent_to_ratio(value_pct: float) -> float:
    return value_pct / 100.0


@lru_cache
def get_settings() -> Settings:
    return Settings()
