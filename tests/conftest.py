"""
pytest configuration and fixtures.

Loads environment variables from .env file for all tests.
"""

import json
from http import HTTPStatus
from pathlib import Path

import pytest
import requests
from dotenv import load_dotenv

from scanstation.config import Settings


def pytest_configure(config):
    """Load .env file before running tests"""
    # Find the project root (where .env is located)
    project_root = Path(__file__).parent.parent
    env_file = project_root / ".env"

    if env_file.exists():
        print(f"Loading environment from {env_file}")
        load_dotenv(env_file)
    else:
        print(f"Warning: .env file not found at {env_file}")


def build_response(
    status_code: int = 200,
    json_body=None,
    text: str = "",
    headers: dict | None = None,
    url: str = "https://upstream.test/",
) -> requests.Response:
    """Build a real requests.Response as an upstream API would return it."""
    response = requests.Response()
    response.status_code = status_code
    response.reason = HTTPStatus(status_code).phrase
    response.url = url
    response.encoding = "utf-8"
    if json_body is not None:
        text = json.dumps(json_body)
        response.headers["Content-Type"] = "application/json"
    response.headers.update(headers or {})
    response._content = text.encode("utf-8")
    return response


@pytest.fixture
def make_response():
    """Factory for fake upstream responses."""
    return build_response


@pytest.fixture
def settings() -> Settings:
    """Fully configured settings, independent of the local environment."""
    return Settings(
        _env_file=None,
        environment="test",
        frontend_origin="*",
        pp_base_url="https://pp.test/ecomService/v28/Json",
        pp_token="pp-token",
        pp_require_token=True,
        pp_accnum="ACC01",
        pp_place_id="ShopifyScanStation",
        shopify_store="flippen-lekka",
        shopify_access_token="shpat_test",
        shopify_location_id="777",
        shopify_api_version="2024-10",
        tracking_company="SWE Couriers",
        printnode_api_key="pn-key",
        printnode_printer_id="4242",
        printnode_base_url="https://api.printnode.com",
        upstream_timeout_seconds=20.0,
        metafield_timeout_seconds=15.0,
        rate_limit_per_minute=0,
    )
