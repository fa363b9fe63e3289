"""
Scan Station data models.

Pydantic models for proxy request bodies and reshaped vendor responses.
"""

# ParcelPerfect models
from scanstation.models.parcelperfect import PlaceLookupParams, ParcelPerfectRequest

# PrintNode models
from scanstation.models.printnode import PrintRequest, PrintResponse

# Shopify models
from scanstation.models.shopify import (
    CustomerSearchResponse,
    CustomerSummary,
    DeliveryMethod,
    DraftLineItem,
    DraftOrderRequest,
    DraftOrderResponse,
    DraftOrderSummary,
    FulfillLineItem,
    FulfillRequest,
    OpenOrder,
    OpenOrderLineItem,
    OpenOrderListResponse,
    OrderLookupResponse,
)

__all__ = [
    # ParcelPerfect
    "ParcelPerfectRequest",
    "PlaceLookupParams",
    # PrintNode
    "PrintRequest",
    "PrintResponse",
    # Shopify
    "CustomerSearchResponse",
    "CustomerSummary",
    "DeliveryMethod",
    "DraftLineItem",
    "DraftOrderRequest",
    "DraftOrderResponse",
    "DraftOrderSummary",
    "FulfillLineItem",
    "FulfillRequest",
    "OpenOrder",
    "OpenOrderLineItem",
    "OpenOrderListResponse",
    "OrderLookupResponse",
]
