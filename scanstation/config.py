"""
Scan Station configuration.

All settings come from environment variables (or a local .env file).
Routes receive them through the get_settings dependency so tests can
override them per app.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

SERVICE_NAME = "scanstation"
DEFAULT_SOURCE = "Flippen Lekka Scan Station"


class Settings(BaseSettings):
    """Environment-backed settings for the proxy service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    environment: str = Field(default="development")
    port: int = Field(default=3000)
    frontend_origin: str = Field(default="*")

    # ParcelPerfect (SWE v28 JSON endpoint)
    pp_base_url: str = Field(default="")
    pp_token: str = Field(default="")
    pp_require_token: bool = Field(default=True)
    pp_accnum: str = Field(default="")
    pp_place_id: str = Field(default="ShopifyScanStation")

    # Shopify Admin API
    shopify_store: Optional[str] = Field(default=None)
    shopify_access_token: Optional[str] = Field(default=None)
    shopify_location_id: Optional[str] = Field(default=None)
    shopify_api_version: str = Field(default="2024-10")
    tracking_company: str = Field(default="SWE Couriers")

    # PrintNode
    printnode_api_key: Optional[str] = Field(default=None)
    printnode_printer_id: Optional[str] = Field(default=None)
    printnode_base_url: str = Field(default="https://api.printnode.com")
    printnode_source: str = Field(default=DEFAULT_SOURCE)

    # Outbound calls
    upstream_timeout_seconds: float = Field(default=20.0)
    metafield_timeout_seconds: float = Field(default=15.0)

    # Requests per minute per client IP (0 disables)
    rate_limit_per_minute: int = Field(default=120)

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def shopify_configured(self) -> bool:
        return bool(self.shopify_store and self.shopify_access_token)

    @property
    def printnode_configured(self) -> bool:
        return bool(self.printnode_api_key and self.printnode_printer_id)

    def allowed_origins(self) -> list[str]:
        """Split FRONTEND_ORIGIN into a list of origins."""
        origins = [o.strip() for o in self.frontend_origin.split(",")]
        return [o for o in origins if o] or ["*"]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
