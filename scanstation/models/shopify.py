from enum import StrEnum
from typing import Any, Optional

from pydantic import BaseModel, Field

from scanstation.models.base import CamelModel


class DeliveryMethod(StrEnum):
    """How a FLOCS order reaches the customer"""

    SHIP = "ship"  # Courier via ParcelPerfect
    PICKUP = "pickup"  # Customer collects
    DELIVER = "deliver"  # Own delivery run


# ===== Fulfillment =====


class FulfillLineItem(CamelModel):
    """Line item and quantity to include in a fulfillment"""

    id: int | str = Field(description="Shopify line item ID")
    quantity: Optional[int] = Field(default=None, description="Quantity to fulfill")


class FulfillRequest(CamelModel):
    """Body of POST /shopify/fulfill"""

    order_id: Optional[int | str] = Field(default=None, description="Shopify order ID")
    tracking_number: Optional[int | str] = Field(default=None, description="Waybill number")
    tracking_url: Optional[str] = Field(default=None, description="Tracking page URL")
    tracking_company: Optional[str] = Field(
        default=None, description="Carrier name (defaults to TRACKING_COMPANY)"
    )
    line_items: Optional[list[FulfillLineItem]] = Field(
        default=None, description="Items to fulfill; all fulfillable items if omitted"
    )


# ===== Draft orders =====


class DraftLineItem(CamelModel):
    """Line item requested by the order capture screen"""

    variant_id: Optional[int | str] = Field(default=None, description="Variant ID")
    quantity: Optional[int] = Field(default=None, description="Quantity (default 1)")
    sku: Optional[str] = Field(default=None, description="Stock keeping unit")
    title: Optional[str] = Field(default=None, description="Line title")
    price: Optional[float] = Field(
        default=None, description="Unit price; Shopify uses the product price if omitted"
    )


class DraftOrderRequest(CamelModel):
    """Body of POST /shopify/draft-orders"""

    customer_id: Optional[int | str] = Field(default=None, description="Customer ID")
    shipping_address: Optional[dict[str, Any]] = Field(default=None)
    billing_address: Optional[dict[str, Any]] = Field(default=None)
    shipping_method: Optional[str] = Field(
        default=None, description="ship, pickup or deliver"
    )
    po_number: Optional[int | str] = Field(default=None, description="Customer PO number")
    line_items: Optional[list[DraftLineItem]] = Field(default=None)
    shipping_price: Optional[float] = Field(default=None, description="Quoted courier price")
    shipping_service: Optional[str] = Field(
        default=None, description="Courier service code, e.g. ECO or RFX"
    )


class DraftOrderSummary(CamelModel):
    """Subset of the created draft order returned to the frontend"""

    id: Optional[int | str] = None
    name: Optional[str] = None
    invoice_url: Optional[str] = None
    admin_url: Optional[str] = None
    subtotal_price: Optional[str] = None
    total_price: Optional[str] = None


class DraftOrderResponse(CamelModel):
    ok: bool = True
    draft_order: DraftOrderSummary


# ===== Order lookups =====


class OrderLookupResponse(CamelModel):
    """Order found by name, with the customer's ParcelPerfect place code"""

    order: dict[str, Any]
    customer_place_code: Optional[str] = None


class OpenOrderLineItem(BaseModel):
    title: Optional[str] = None
    quantity: Optional[int] = None


class OpenOrder(BaseModel):
    """Order row shown on the dispatch board"""

    id: int | str
    name: Optional[str] = Field(default=None, description="Order name, e.g. #253199")
    customer_name: str = Field(default="", description="Display name for the board")
    created_at: Optional[str] = Field(default=None, description="Processed/created time")
    fulfillment_status: Optional[str] = None
    shipping_city: str = ""
    shipping_postal: str = ""
    parcel_count: Optional[int] = Field(
        default=None, description="Parcel count from a parcel_count_N tag"
    )
    line_items: list[OpenOrderLineItem] = Field(default_factory=list)


class OpenOrderListResponse(BaseModel):
    orders: list[OpenOrder]


# ===== Customers =====


class CustomerSummary(BaseModel):
    """Customer search result for order capture"""

    id: int | str
    name: str
    email: str = ""
    phone: str = ""
    delivery_method: Optional[str] = Field(
        default=None, description="custom.delivery_method metafield, lowercased"
    )
    default_address: Optional[dict[str, Any]] = None
    addresses: list[dict[str, Any]] = Field(default_factory=list)


class CustomerSearchResponse(BaseModel):
    customers: list[CustomerSummary]
