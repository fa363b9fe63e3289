"""
ParcelPerfect proxy routes.

The browser never sees the ParcelPerfect token: it posts the method call
here and the proxy adds the token before forwarding.
"""

import logging
from typing import Optional

import requests
from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import JSONResponse

from scanstation.api.errors import bad_request, config_error
from scanstation.clients.http import parse_body
from scanstation.clients.parcelperfect import ParcelPerfectClient
from scanstation.config import Settings, get_settings
from scanstation.models.parcelperfect import ParcelPerfectRequest

logger = logging.getLogger(__name__)

router = APIRouter()


def _forward(upstream: requests.Response) -> Response:
    """Relay the upstream status and body, as JSON when it parses."""
    data, is_json = parse_body(upstream)
    if is_json:
        return JSONResponse(status_code=upstream.status_code, content=data)

    media_type = upstream.headers.get("content-type") or "text/plain; charset=utf-8"
    return Response(content=data, status_code=upstream.status_code, media_type=media_type)


def _client(settings: Settings) -> ParcelPerfectClient:
    client = ParcelPerfectClient.from_settings(settings)
    if not client.has_valid_base_url:
        logger.error(f"PP_BASE_URL is invalid: {client.base_url!r}")
        raise config_error("PP_BASE_URL is not a valid URL")
    return client


@router.post("/pp", operation_id="parcelPerfectCall")
def parcelperfect_call(
    body: Optional[ParcelPerfectRequest] = None,
    settings: Settings = Depends(get_settings),
) -> Response:
    """
    Forward a quote/waybill method call to ParcelPerfect.

    Body: {method, classVal, params}. The upstream status and body are
    returned unchanged.

    Raises:
        400: method, classVal or params missing
        500: PP_BASE_URL not configured
        502: ParcelPerfect unreachable or timed out
    """
    body = body or ParcelPerfectRequest()
    if not body.method or not body.class_val or not isinstance(body.params, dict):
        raise bad_request("Expected { method, classVal, params } in body")

    client = _client(settings)
    upstream = client.call(str(body.method), str(body.class_val), body.params)
    return _forward(upstream)


@router.get("/pp/place", operation_id="parcelPerfectPlaceLookup")
def parcelperfect_place(
    q: str = Query(default="", description="Town or suburb to search"),
    query: str = Query(default="", description="Alias for q"),
    settings: Settings = Depends(get_settings),
) -> Response:
    """
    Look up ParcelPerfect place codes (Waybill.getPlace).

    Raises:
        400: No query given
        500: PP_BASE_URL or PP_TOKEN not configured
        502: ParcelPerfect unreachable or timed out
    """
    search = (q or query).strip()
    if not search:
        raise bad_request("Missing ?q= query string for place search")

    client = _client(settings)
    if not client.token:
        raise config_error("PP_TOKEN is required for getPlace")

    upstream = client.get_place(search)
    return _forward(upstream)
