"""
Configuration management for the wholesale admin console backend.

Loads settings from .env via pydantic-settings.

Notes:
    - TAX_RATE is configuration, not a constant baked into document composition
    - validate_production_settings() enforces https upstream + strict CORS in production
"""
import logging
from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ── Order Service (storefront backend) ──────────────────────────
    order_service_url: str = "http://localhost:4000"
    order_service_timeout_seconds: float = 10.0
    order_service_max_retries: int = 2          # extra attempts after the first
    order_service_retry_backoff_seconds: float = 0.5
    order_feed_oldest_first: bool = True        # /api/order/list returns insertion order

    # ── Order Cache ─────────────────────────────────────────────────
    resync_delay_seconds: float = 1.0
    orders_page_size: int = 6

    # ── Documents ───────────────────────────────────────────────────
    tax_rate: Decimal = Decimal("0.05")
    currency_symbol: str = "₹"
    waybill_page_size: str = "A6"               # A4, A5, A6 or LABEL_4X6

    # ── Application ─────────────────────────────────────────────────
    environment: str = "development"

    # ── CORS ────────────────────────────────────────────────────────
    cors_origins: str = "http://localhost:5173,http://127.0.0.1:5173,http://localhost:5174,http://127.0.0.1:5174"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # allow unknown .env keys without crashing
    )

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    def validate_production_settings(self):
        """
        Validate settings for production safety.

        Called during app startup.
        """
        from domain.constants import PAGE_SIZES_MM

        if self.waybill_page_size not in PAGE_SIZES_MM:
            raise ValueError(
                f"WAYBILL_PAGE_SIZE must be one of {', '.join(PAGE_SIZES_MM)}, "
                f"got {self.waybill_page_size!r}"
            )
        if self.tax_rate < 0:
            raise ValueError("TAX_RATE must not be negative")
        if self.orders_page_size < 1:
            raise ValueError("ORDERS_PAGE_SIZE must be at least 1")

        if self.environment == "production":
            if "*" in self.cors_origins:
                raise ValueError(
                    "CORS_ORIGINS must not contain '*' in production. "
                    "Set explicit allowed origins."
                )
            # Bearer credentials are forwarded upstream as-is
            if not self.order_service_url.startswith("https://"):
                raise ValueError(
                    "ORDER_SERVICE_URL must use https in production. "
                    "Operator bearer tokens are forwarded to it."
                )
            logger.info("✅ Production settings validated")
        else:
            warnings = []
            if not self.order_service_url.startswith("https://"):
                warnings.append(f"ORDER_SERVICE_URL is not https ({self.order_service_url})")
            if "*" in self.cors_origins:
                warnings.append("CORS_ORIGINS contains '*' (open access)")
            for w in warnings:
                logger.warning(f"⚠️  {w}")


# Global settings instance
settings = Settings()
