"""
Shopify payload shaping utilities.

Pure functions that build Admin API request bodies from frontend requests
and reduce Admin API resources to what the scan station screens display.
"""

import re
from typing import Any, Optional

from scanstation.models.shopify import (
    CustomerSummary,
    DeliveryMethod,
    DraftOrderRequest,
    FulfillRequest,
    OpenOrder,
    OpenOrderLineItem,
)

PARCEL_COUNT_TAG = re.compile(r"^parcel_count_(\d+)$")

DRAFT_ORDER_TAG = "FLOCS"
DRAFT_METAFIELD_NAMESPACE = "flocs"


def normalize_order_name(name: str) -> str:
    """Prefix an order name with '#' as Shopify stores it (e.g. 1234 -> #1234)."""
    name = name or ""
    return name if name.startswith("#") else f"#{name}"


def format_price(value: float) -> str:
    """Format a price with two decimals, as the Admin API expects."""
    return f"{float(value):.2f}"


def parcel_count_from_tags(tags: Any) -> Optional[int]:
    """
    Extract the parcel count from a comma-separated Shopify tag string.

    Tags are matched case-insensitively; the first parcel_count_N tag wins.
    """
    if not isinstance(tags, str) or not tags.strip():
        return None

    for tag in tags.split(","):
        match = PARCEL_COUNT_TAG.match(tag.strip().lower())
        if match:
            return int(match.group(1))

    return None


def _full_name(person: dict[str, Any]) -> str:
    first = (person.get("first_name") or "").strip()
    last = (person.get("last_name") or "").strip()
    return f"{first} {last}".strip()


def summarize_open_order(order: dict[str, Any]) -> OpenOrder:
    """
    Reduce an Admin API order to a dispatch board row.

    customer_name falls back from the shipping name to the customer's
    first/last name, and finally to the order name without its '#'.
    """
    shipping = order.get("shipping_address") or {}
    customer = order.get("customer") or {}

    customer_name = (
        shipping.get("name")
        or _full_name(customer)
        or re.sub(r"^#", "", order.get("name") or "")
    )

    return OpenOrder(
        id=order.get("id"),
        name=order.get("name"),
        customer_name=customer_name,
        created_at=order.get("processed_at") or order.get("created_at"),
        fulfillment_status=order.get("fulfillment_status"),
        shipping_city=shipping.get("city") or "",
        shipping_postal=shipping.get("zip") or "",
        parcel_count=parcel_count_from_tags(order.get("tags")),
        line_items=[
            OpenOrderLineItem(title=li.get("title"), quantity=li.get("quantity"))
            for li in order.get("line_items") or []
        ],
    )


def customer_display_name(customer: dict[str, Any]) -> str:
    """Name, company, email, then ID: the first one that is present."""
    name = f"{customer.get('first_name') or ''} {customer.get('last_name') or ''}".strip()
    return (
        name
        or customer.get("company")
        or customer.get("email")
        or str(customer.get("id"))
    )


def summarize_customer(
    customer: dict[str, Any], delivery_method: Optional[str] = None
) -> CustomerSummary:
    addresses = customer.get("addresses")
    return CustomerSummary(
        id=customer.get("id"),
        name=customer_display_name(customer),
        email=customer.get("email") or "",
        phone=customer.get("phone") or "",
        delivery_method=delivery_method,
        default_address=customer.get("default_address") or None,
        addresses=addresses if isinstance(addresses, list) else [],
    )


def build_fulfillment_payload(
    request: FulfillRequest,
    default_tracking_company: str,
    location_id: Optional[str] = None,
) -> dict[str, Any]:
    """
    Build the body for POST /orders/{id}/fulfillments.json.

    Without line items Shopify fulfills every fulfillable item.
    """
    fulfillment: dict[str, Any] = {}
    if location_id:
        fulfillment["location_id"] = int(location_id)

    fulfillment["tracking_company"] = request.tracking_company or default_tracking_company
    fulfillment["tracking_number"] = str(request.tracking_number)
    if request.tracking_url:
        fulfillment["tracking_url"] = request.tracking_url
    fulfillment["notify_customer"] = True

    if request.line_items:
        fulfillment["line_items"] = [
            {"id": li.id, "quantity": li.quantity}
            if li.quantity is not None
            else {"id": li.id}
            for li in request.line_items
        ]

    return {"fulfillment": fulfillment}


def build_draft_order_payload(request: DraftOrderRequest) -> dict[str, Any]:
    """Build the body for POST /draft_orders.json."""
    line_items = []
    for li in request.line_items or []:
        item: dict[str, Any] = {
            "variant_id": li.variant_id,
            "quantity": li.quantity or 1,
        }
        if li.sku:
            item["sku"] = li.sku
        if li.title:
            item["title"] = li.title
        if li.price is not None:
            item["price"] = format_price(li.price)
        line_items.append(item)

    metafields = []
    if request.po_number:
        metafields.append(
            {
                "namespace": DRAFT_METAFIELD_NAMESPACE,
                "key": "po_number",
                "type": "single_line_text_field",
                "value": str(request.po_number),
            }
        )
    if request.shipping_method:
        metafields.append(
            {
                "namespace": DRAFT_METAFIELD_NAMESPACE,
                "key": "delivery_method",
                "type": "single_line_text_field",
                "value": str(request.shipping_method),
            }
        )

    is_ship = request.shipping_method == DeliveryMethod.SHIP

    draft: dict[str, Any] = {
        "customer": {"id": request.customer_id},
        "line_items": line_items,
    }
    if request.po_number:
        draft["note"] = f"PO: {request.po_number}"
    draft["tags"] = [DRAFT_ORDER_TAG]

    if is_ship and request.shipping_price is not None:
        title = (
            f"Courier – {request.shipping_service}"
            if request.shipping_service
            else "Courier shipping"
        )
        draft["shipping_line"] = {
            "title": title,
            "price": format_price(request.shipping_price),
        }

    if request.billing_address:
        draft["billing_address"] = request.billing_address
    if is_ship and request.shipping_address:
        draft["shipping_address"] = request.shipping_address

    draft["metafields"] = metafields

    return {"draft_order": draft}
