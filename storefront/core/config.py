"""Storefront configuration"""

import os
from decimal import Decimal
from typing import Optional
from pydantic_settings import BaseSettings
from functools import lru_cache
from dotenv import load_dotenv

load_dotenv()

DEFAULT_DATA_DIR = os.path.join(os.path.dirname(__file__), "..", "data")


class Settings(BaseSettings):
    """Application settings loaded from environment"""

    # Application
    app_name: str = "Storefront"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8001

    # Data sources: a fixture directory or an http(s) base URL
    data_source: str = DEFAULT_DATA_DIR
    request_timeout: float = 10.0

    # Cart snapshot file (local storage equivalent); in-memory when unset
    cart_storage_path: Optional[str] = None
    session_max_age_hours: int = 24

    # Pricing
    currency: str = "EUR"
    tax_rate: Decimal = Decimal("0.22")
    free_shipping_threshold: Decimal = Decimal("50.00")
    shipping_fee: Decimal = Decimal("9.99")

    # Catalog
    default_page_size: int = 12
    max_page_size: int = 100
    related_limit: int = 4
    featured_limit: int = 6

    class Config:
        env_prefix = "STOREFRONT_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
