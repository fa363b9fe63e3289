"""
Outbound clients for the vendor APIs behind the proxy.
"""

from scanstation.clients.http import (
    UpstreamRequestError,
    UpstreamStatusError,
    UpstreamTimeoutError,
    fetch_with_timeout,
)
from scanstation.clients.parcelperfect import ParcelPerfectClient
from scanstation.clients.printnode import PrintNodeClient
from scanstation.clients.shopify import ShopifyClient

__all__ = [
    "ParcelPerfectClient",
    "PrintNodeClient",
    "ShopifyClient",
    "UpstreamRequestError",
    "UpstreamStatusError",
    "UpstreamTimeoutError",
    "fetch_with_timeout",
]
