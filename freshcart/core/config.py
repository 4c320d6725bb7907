"""FreshCart Configuration"""

from typing import Optional
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment"""

    # Application
    app_name: str = "FreshCart"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000

    # Pricing
    currency: str = "INR"
    delivery_fee: float = 25.0
    free_delivery_threshold: float = 200.0

    # Cart persistence (unset keeps carts in memory only)
    cart_storage_dir: Optional[str] = None

    # Hosted backend (unset uses the in-memory order database)
    backend_url: Optional[str] = None
    backend_api_key: Optional[str] = None
    backend_timeout: float = 30.0

    # Session auth
    auth_jwt_secret: str = "dev-secret-change-me"
    auth_jwt_algorithm: str = "HS256"
    auth_jwt_audience: Optional[str] = "authenticated"

    # Housekeeping
    session_max_age_hours: int = 24
    orphan_order_ttl_seconds: int = 300
    housekeeping_interval_seconds: float = 60.0  # 0 disables the background task

    class Config:
        env_file = "config/.env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"

    @property
    def backend_configured(self) -> bool:
        """Check if a hosted backend is configured"""
        return bool(self.backend_url and self.backend_api_key)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
