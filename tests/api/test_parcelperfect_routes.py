"""
Tests for the ParcelPerfect proxy endpoints.

Upstream calls are mocked at requests.request.
"""

from unittest.mock import patch

import pytest
import requests
from fastapi.testclient import TestClient

from scanstation.api.main import create_app
from scanstation.config import Settings


@pytest.fixture
def client(settings: Settings) -> TestClient:
    """Create a test client for the API."""
    return TestClient(create_app(settings))


@pytest.fixture
def mock_request():
    with patch("scanstation.clients.http.requests.request") as mock:
        yield mock


QUOTE_BODY = {
    "method": "requestQuote",
    "classVal": "quote",
    "params": {"details": {"origtown": "Durban"}, "contents": [{"item": 1}]},
}


class TestParcelPerfectCall:
    """Tests for POST /pp endpoint."""

    def test_forwards_json(self, client, mock_request, make_response):
        mock_request.return_value = make_response(
            200, json_body={"errorcode": 0, "results": [{"quoteno": "Q1"}]}
        )

        response = client.post("/pp", json=QUOTE_BODY)

        assert response.status_code == 200
        assert response.json() == {"errorcode": 0, "results": [{"quoteno": "Q1"}]}

        args, kwargs = mock_request.call_args
        assert args == ("POST", "https://pp.test/ecomService/v28/Json")
        assert kwargs["data"] == {
            "method": "requestQuote",
            "class": "quote",
            "params": '{"details":{"origtown":"Durban"},"contents":[{"item":1}]}',
            "token_id": "pp-token",
        }

    def test_numeric_method_and_class(self, client, mock_request, make_response):
        mock_request.return_value = make_response(200, json_body={"errorcode": 0})

        response = client.post("/pp", json={"method": 7, "classVal": 3, "params": {}})

        assert response.status_code == 200
        data = mock_request.call_args.kwargs["data"]
        assert data["method"] == "7"
        assert data["class"] == "3"

    def test_forwards_upstream_status_and_text(self, client, mock_request, make_response):
        mock_request.return_value = make_response(
            503, text="Service Unavailable", headers={"Content-Type": "text/html"}
        )

        response = client.post("/pp", json=QUOTE_BODY)

        assert response.status_code == 503
        assert response.text == "Service Unavailable"
        assert response.headers["content-type"].startswith("text/html")

    def test_text_without_content_type(self, client, mock_request, make_response):
        mock_request.return_value = make_response(200, text="OK")

        response = client.post("/pp", json=QUOTE_BODY)

        assert response.text == "OK"
        assert response.headers["content-type"].startswith("text/plain")

    @pytest.mark.parametrize(
        "body",
        [
            {},
            {"classVal": "quote", "params": {}},
            {"method": "requestQuote", "params": {}},
            {"method": "requestQuote", "classVal": "quote"},
            {"method": "requestQuote", "classVal": "quote", "params": [1, 2]},
            {"method": "requestQuote", "classVal": "quote", "params": None},
        ],
    )
    def test_missing_fields(self, client, mock_request, body):
        response = client.post("/pp", json=body)

        assert response.status_code == 400
        assert response.json() == {
            "error": "BAD_REQUEST",
            "message": "Expected { method, classVal, params } in body",
        }
        mock_request.assert_not_called()

    def test_empty_body(self, client, mock_request):
        response = client.post("/pp")

        assert response.status_code == 400
        assert response.json()["error"] == "BAD_REQUEST"

    def test_invalid_base_url(self, settings, mock_request):
        settings.pp_base_url = "pp.test/Json"
        client = TestClient(create_app(settings))

        response = client.post("/pp", json=QUOTE_BODY)

        assert response.status_code == 500
        assert response.json() == {
            "error": "CONFIG_ERROR",
            "message": "PP_BASE_URL is not a valid URL",
        }
        mock_request.assert_not_called()

    def test_timeout_is_bad_gateway(self, client, mock_request):
        mock_request.side_effect = requests.Timeout()

        response = client.post("/pp", json=QUOTE_BODY)

        assert response.status_code == 502
        assert response.json() == {
            "error": "UPSTREAM_ERROR",
            "message": "Request to https://pp.test/ecomService/v28/Json timed out after 20000ms",
        }


class TestPlaceLookup:
    """Tests for GET /pp/place endpoint."""

    def test_lookup(self, client, mock_request, make_response):
        mock_request.return_value = make_response(
            200, json_body={"errorcode": 0, "results": [{"place": 4001, "town": "DURBAN"}]}
        )

        response = client.get("/pp/place", params={"q": "  Durban "})

        assert response.status_code == 200
        assert response.json()["results"][0]["place"] == 4001

        args, kwargs = mock_request.call_args
        assert args == ("GET", "https://pp.test/ecomService/v28/Json/")
        params = dict(kwargs["params"])
        assert params["Class"] == "Waybill"
        assert params["method"] == "getPlace"
        assert params["token_id"] == "pp-token"
        assert params["query"] == "Durban"

    def test_query_alias(self, client, mock_request, make_response):
        mock_request.return_value = make_response(200, json_body={"results": []})

        response = client.get("/pp/place", params={"query": "Umlazi"})

        assert response.status_code == 200
        assert dict(mock_request.call_args.kwargs["params"])["query"] == "Umlazi"

    def test_missing_query(self, client, mock_request):
        response = client.get("/pp/place", params={"q": "   "})

        assert response.status_code == 400
        assert response.json() == {
            "error": "BAD_REQUEST",
            "message": "Missing ?q= query string for place search",
        }
        mock_request.assert_not_called()

    def test_requires_token(self, settings, mock_request):
        settings.pp_token = ""
        client = TestClient(create_app(settings))

        response = client.get("/pp/place", params={"q": "Durban"})

        assert response.status_code == 500
        assert response.json() == {
            "error": "CONFIG_ERROR",
            "message": "PP_TOKEN is required for getPlace",
        }
