"""
FastAPI dependencies that turn settings into configured vendor clients.
"""

from fastapi import Depends, status

from scanstation.api.errors import config_error
from scanstation.clients.shopify import ShopifyClient
from scanstation.config import Settings, get_settings


def require_shopify_client(settings: Settings) -> ShopifyClient:
    """
    Build a Shopify client, or fail if the store is not configured.

    Raises:
        ProxyError: 501 SHOPIFY_NOT_CONFIGURED
    """
    if not settings.shopify_configured:
        raise config_error(
            "Set SHOPIFY_STORE and SHOPIFY_ACCESS_TOKEN in .env",
            error="SHOPIFY_NOT_CONFIGURED",
            status_code=status.HTTP_501_NOT_IMPLEMENTED,
        )
    return ShopifyClient.from_settings(settings)


async def get_shopify_client(
    settings: Settings = Depends(get_settings),
) -> ShopifyClient:
    return require_shopify_client(settings)
