"""
ParcelPerfect (SWE ecomService v28 JSON) client.

Calls are form-encoded POSTs or query-string GETs against one base URL.
The params object always travels as compact JSON text.
"""

import json
import logging
from typing import Any

import requests

from scanstation.clients.http import fetch_with_timeout
from scanstation.config import Settings
from scanstation.models.parcelperfect import PlaceLookupParams

logger = logging.getLogger(__name__)


def compact_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


class ParcelPerfectClient:
    """Client for the ParcelPerfect JSON endpoint."""

    def __init__(
        self,
        base_url: str,
        token: str = "",
        require_token: bool = True,
        accnum: str = "",
        place_id: str = "ShopifyScanStation",
        timeout: float = 20.0,
    ):
        self.base_url = base_url or ""
        self.token = token
        self.require_token = require_token
        self.accnum = accnum
        self.place_id = place_id
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "ParcelPerfectClient":
        return cls(
            base_url=settings.pp_base_url,
            token=settings.pp_token,
            require_token=settings.pp_require_token,
            accnum=settings.pp_accnum,
            place_id=settings.pp_place_id,
            timeout=settings.upstream_timeout_seconds,
        )

    @property
    def has_valid_base_url(self) -> bool:
        return self.base_url.startswith("http")

    def build_form(self, method: str, class_val: str, params: dict[str, Any]) -> dict[str, str]:
        """Form fields for a POST call. token_id is only sent when required."""
        form = {
            "method": str(method),
            "class": str(class_val),
            "params": compact_json(params),
        }
        if self.require_token and self.token:
            form["token_id"] = self.token
        return form

    def call(self, method: str, class_val: str, params: dict[str, Any]) -> requests.Response:
        """
        POST a method call (e.g. quote.requestQuote) and return the raw response.

        Raises:
            UpstreamRequestError: On network errors or timeout
        """
        logger.info(
            f"ParcelPerfect {class_val}.{method}",
            extra={"json_fields": {"base_url": self.base_url, "params": params}},
        )
        return fetch_with_timeout(
            "POST",
            self.base_url,
            timeout=self.timeout,
            data=self.build_form(method, class_val, params),
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )

    def place_query(self, query: str) -> list[tuple[str, str]]:
        """Ordered query string for Waybill.getPlace (plain JSON, no JSONP callback)."""
        params = PlaceLookupParams(id=self.place_id or "ShopifyScanStation", accnum=self.accnum or "")
        return [
            ("Class", "Waybill"),
            ("method", "getPlace"),
            ("token_id", self.token),
            ("params", compact_json(params.model_dump())),
            ("query", query),
        ]

    def get_place(self, query: str) -> requests.Response:
        """
        Look up ParcelPerfect places matching a town/suburb query.

        Raises:
            UpstreamRequestError: On network errors or timeout
        """
        url = self.base_url if self.base_url.endswith("/") else f"{self.base_url}/"
        logger.info(f"ParcelPerfect getPlace query={query!r}")
        return fetch_with_timeout(
            "GET", url, timeout=self.timeout, params=self.place_query(query)
        )
