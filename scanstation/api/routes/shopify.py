"""
Shopify Admin API proxy routes.

Used by the scan station (order lookup, dispatch board, fulfillment on
booking) and by the order capture screen (customer search, draft orders).
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from scanstation.api.dependencies import get_shopify_client, require_shopify_client
from scanstation.api.errors import ProxyError, bad_request, upstream_status_error
from scanstation.clients.http import UpstreamRequestError, UpstreamStatusError
from scanstation.clients.shopify import ShopifyClient
from scanstation.config import Settings, get_settings
from scanstation.models.shopify import (
    CustomerSearchResponse,
    DraftOrderRequest,
    DraftOrderResponse,
    DraftOrderSummary,
    FulfillRequest,
    OpenOrderListResponse,
    OrderLookupResponse,
)
from scanstation.utils.shopify import (
    build_draft_order_payload,
    build_fulfillment_payload,
    normalize_order_name,
    summarize_customer,
    summarize_open_order,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/shopify")

PLACE_CODE_METAFIELD = ("custom", "parcelperfect_place_code")
DELIVERY_METHOD_METAFIELD = ("custom", "delivery_method")


@router.get(
    "/orders/by-name/{name}",
    response_model=OrderLookupResponse,
    operation_id="getOrderByName",
)
def get_order_by_name(
    name: str,
    client: ShopifyClient = Depends(get_shopify_client),
) -> OrderLookupResponse:
    """
    Find an order by its name and attach the customer's place code.

    The place code comes from the customer metafield
    custom.parcelperfect_place_code; if that lookup fails the order is
    still returned with customerPlaceCode null.

    Raises:
        404: No order with that name
        501: Shopify not configured
    """
    try:
        order = client.find_order_by_name(normalize_order_name(name))
    except UpstreamStatusError as e:
        raise upstream_status_error("SHOPIFY_UPSTREAM", e, e.text)

    if order is None:
        raise ProxyError(
            status.HTTP_404_NOT_FOUND,
            {"error": "NOT_FOUND", "message": "Order not found"},
        )

    place_code = None
    customer_id = (order.get("customer") or {}).get("id")
    if customer_id:
        place_code = client.get_customer_metafield(customer_id, *PLACE_CODE_METAFIELD)

    return OrderLookupResponse(order=order, customer_place_code=place_code)


@router.get(
    "/orders/open",
    response_model=OpenOrderListResponse,
    operation_id="listOpenOrders",
)
def list_open_orders(
    client: ShopifyClient = Depends(get_shopify_client),
) -> OpenOrderListResponse:
    """List unfulfilled and in-progress orders for the dispatch board."""
    try:
        orders = client.list_open_orders()
    except UpstreamStatusError as e:
        raise upstream_status_error("SHOPIFY_UPSTREAM", e, e.text)

    return OpenOrderListResponse(orders=[summarize_open_order(o) for o in orders])


@router.post("/fulfill", operation_id="fulfillOrder")
def fulfill_order(
    body: Optional[FulfillRequest] = None,
    settings: Settings = Depends(get_settings),
) -> dict:
    """
    Mark an order fulfilled with the booked waybill's tracking details.

    Raises:
        400: orderId or trackingNumber missing (MISSING_FIELDS)
        501: Shopify not configured
    """
    body = body or FulfillRequest()
    if not body.order_id or not body.tracking_number:
        raise ProxyError(
            status.HTTP_400_BAD_REQUEST,
            {
                "ok": False,
                "error": "MISSING_FIELDS",
                "message": "orderId and trackingNumber are required",
            },
        )

    client = require_shopify_client(settings)
    payload = build_fulfillment_payload(
        body,
        default_tracking_company=settings.tracking_company,
        location_id=settings.shopify_location_id,
    )

    try:
        fulfillment = client.create_fulfillment(body.order_id, payload)
    except UpstreamStatusError as e:
        logger.warning(
            f"Shopify fulfill failed for order {body.order_id}",
            extra={"json_fields": {"status": e.status_code, "body": e.text[:400]}},
        )
        raise ProxyError(
            e.status_code,
            {
                "ok": False,
                "status": e.status_code,
                "error": "SHOPIFY_ERROR",
                "detail": e.data,
            },
        )
    except UpstreamRequestError as e:
        logger.error(f"Fulfill error: {e}")
        raise ProxyError(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            {"ok": False, "error": "SERVER_ERROR", "detail": str(e)},
        )

    return {"ok": True, "fulfillment": fulfillment}


@router.get(
    "/customers/search",
    response_model=CustomerSearchResponse,
    operation_id="searchCustomers",
)
def search_customers(
    q: str = Query(default="", description="Name, email or phone"),
    client: ShopifyClient = Depends(get_shopify_client),
) -> CustomerSearchResponse:
    """
    Search customers and attach each one's preferred delivery method.

    Metafields are fetched one customer at a time; a failed lookup leaves
    delivery_method null.
    """
    query = q.strip()
    if not query:
        raise bad_request("Missing ?q= query string for customer search")

    try:
        customers = client.search_customers(query)
    except UpstreamStatusError as e:
        raise upstream_status_error("SHOPIFY_UPSTREAM", e, e.data)

    results = []
    for customer in customers:
        delivery_method = None
        if customer.get("id"):
            value = client.get_customer_metafield(
                customer["id"], *DELIVERY_METHOD_METAFIELD
            )
            delivery_method = value.lower() if value else None
        results.append(summarize_customer(customer, delivery_method))

    return CustomerSearchResponse(customers=results)


@router.post(
    "/draft-orders",
    response_model=DraftOrderResponse,
    operation_id="createDraftOrder",
)
def create_draft_order(
    body: Optional[DraftOrderRequest] = None,
    client: ShopifyClient = Depends(get_shopify_client),
) -> DraftOrderResponse:
    """
    Create a draft order for the order capture screen.

    Raises:
        400: customerId or lineItems missing
        501: Shopify not configured
    """
    body = body or DraftOrderRequest()
    echo = body.model_dump(by_alias=True, exclude_unset=True)
    if not body.customer_id:
        raise bad_request("Missing customerId", echo)
    if not body.line_items:
        raise bad_request("No lineItems supplied", echo)

    try:
        draft = client.create_draft_order(build_draft_order_payload(body))
    except UpstreamStatusError as e:
        logger.error(
            f"Draft order error: {e.status_code}",
            extra={"json_fields": {"body": e.text[:400]}},
        )
        raise upstream_status_error("SHOPIFY_UPSTREAM", e, e.data)

    draft_id = draft.get("id")
    return DraftOrderResponse(
        ok=True,
        draft_order=DraftOrderSummary(
            id=draft_id,
            name=draft.get("name"),
            invoice_url=draft.get("invoice_url") or None,
            admin_url=client.admin_url("draft_orders", draft_id) if draft_id else None,
            subtotal_price=draft.get("subtotal_price"),
            total_price=draft.get("total_price"),
        ),
    )
