"""
Minimal Shopify Admin REST API client.

Only the calls the scan station needs: order lookup, open orders,
customer search, customer metafields, draft orders and fulfillments.
"""

import logging
from typing import Any, Optional

from scanstation.clients.http import (
    UpstreamRequestError,
    fetch_with_timeout,
    parse_body_or_raw,
    raise_for_upstream_status,
)
from scanstation.config import Settings

logger = logging.getLogger(__name__)

OPEN_FULFILLMENT_STATUSES = "unfulfilled,in_progress"


class ShopifyClient:
    """Shopify Admin API client bound to one store and access token."""

    def __init__(
        self,
        store: str,
        access_token: str,
        api_version: str = "2024-10",
        timeout: float = 20.0,
        metafield_timeout: float = 15.0,
    ):
        self.store = store
        self.access_token = access_token
        self.api_version = api_version
        self.timeout = timeout
        self.metafield_timeout = metafield_timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "ShopifyClient":
        return cls(
            store=settings.shopify_store,
            access_token=settings.shopify_access_token,
            api_version=settings.shopify_api_version,
            timeout=settings.upstream_timeout_seconds,
            metafield_timeout=settings.metafield_timeout_seconds,
        )

    @property
    def base_url(self) -> str:
        return f"https://{self.store}.myshopify.com/admin/api/{self.api_version}"

    def admin_url(self, resource: str, resource_id: Any) -> str:
        """Link to a resource in the Shopify admin UI."""
        return f"https://{self.store}.myshopify.com/admin/{resource}/{resource_id}"

    def _headers(self) -> dict[str, str]:
        return {
            "X-Shopify-Access-Token": self.access_token,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _request(
        self,
        method: str,
        path: str,
        timeout: Optional[float] = None,
        **kwargs: Any,
    ):
        url = f"{self.base_url}{path}"
        response = fetch_with_timeout(
            method,
            url,
            timeout=timeout or self.timeout,
            headers=self._headers(),
            **kwargs,
        )
        logger.info(
            f"Shopify {method} {path} -> {response.status_code}",
            extra={"json_fields": {"store": self.store, "status": response.status_code}},
        )
        return response

    def _json(self, response) -> dict[str, Any]:
        """Decode a 2xx JSON body; anything else counts as an upstream failure."""
        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamRequestError(response.url, f"Invalid JSON from Shopify: {e}") from e
        return data if isinstance(data, dict) else {}

    def find_order_by_name(self, name: str) -> Optional[dict[str, Any]]:
        """
        Find the first order with the given name (e.g. "#1234").

        Returns:
            The order resource, or None if no order matched

        Raises:
            UpstreamStatusError: On a non-2xx Shopify response
            UpstreamRequestError: On network errors or timeout
        """
        response = self._request(
            "GET", "/orders.json", params={"status": "any", "name": name}
        )
        raise_for_upstream_status(response)

        orders = self._json(response).get("orders")
        if isinstance(orders, list) and orders:
            return orders[0]
        return None

    def list_open_orders(self, limit: int = 50) -> list[dict[str, Any]]:
        """List unfulfilled and in-progress orders, most recent first."""
        response = self._request(
            "GET",
            "/orders.json",
            params={
                "status": "any",
                "fulfillment_status": OPEN_FULFILLMENT_STATUSES,
                "limit": limit,
                "order": "created_at desc",
            },
        )
        raise_for_upstream_status(response)

        orders = self._json(response).get("orders")
        return orders if isinstance(orders, list) else []

    def search_customers(self, query: str, limit: int = 10) -> list[dict[str, Any]]:
        """Search customers by name, email or phone."""
        response = self._request(
            "GET",
            "/customers/search.json",
            params={"query": query, "limit": limit},
        )
        raise_for_upstream_status(response)

        data = parse_body_or_raw(response)
        customers = data.get("customers") if isinstance(data, dict) else None
        return customers if isinstance(customers, list) else []

    def get_customer_metafield(
        self, customer_id: Any, namespace: str, key: str
    ) -> Optional[str]:
        """
        Read one customer metafield value.

        This is a secondary lookup: any failure is logged and yields None
        so the primary response can still be returned.
        """
        try:
            response = self._request(
                "GET",
                f"/customers/{customer_id}/metafields.json",
                timeout=self.metafield_timeout,
            )
            if not response.ok:
                logger.warning(
                    "Customer metafields fetch failed",
                    extra={
                        "json_fields": {
                            "customer_id": customer_id,
                            "status": response.status_code,
                            "body": response.text[:400],
                        }
                    },
                )
                return None

            metafields = response.json().get("metafields") or []
        except (UpstreamRequestError, ValueError, AttributeError) as e:
            logger.warning(
                f"Customer metafields error: {e}",
                extra={"json_fields": {"customer_id": customer_id, "key": key}},
            )
            return None

        for metafield in metafields:
            if metafield.get("namespace") == namespace and metafield.get("key") == key:
                value = metafield.get("value")
                return str(value) if value else None
        return None

    def create_draft_order(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Create a draft order and return the draft_order resource."""
        response = self._request("POST", "/draft_orders.json", json=payload)
        raise_for_upstream_status(response)

        data = parse_body_or_raw(response)
        return data.get("draft_order") or data

    def create_fulfillment(self, order_id: Any, payload: dict[str, Any]) -> dict[str, Any]:
        """Create a fulfillment for an order and return the fulfillment resource."""
        response = self._request(
            "POST", f"/orders/{order_id}/fulfillments.json", json=payload
        )
        raise_for_upstream_status(response)

        data = parse_body_or_raw(response)
        return data.get("fulfillment") or data
