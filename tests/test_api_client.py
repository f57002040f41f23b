"""Tests for the shop API client"""
import json

import httpx
import pytest

from storefront import api_client as api_client_module
from storefront.api_client import ApiClient, get_api_client
from storefront.errors import ApiError


def _client(handler):
    return ApiClient("http://shop.test/api/", transport=httpx.MockTransport(handler))


def test_build_url_joins_with_single_slash():
    client = ApiClient("http://shop.test/api/")
    assert client.build_url("products") == "http://shop.test/api/products"
    assert client.build_url("/products") == "http://shop.test/api/products"


def test_empty_base_url_rejected():
    with pytest.raises(ValueError):
        ApiClient("")


@pytest.mark.asyncio
async def test_get_sends_headers_and_skips_none_query():
    seen = {}

    def handler(request):
        seen["request"] = request
        return httpx.Response(200, json={"ok": True})

    result = await _client(handler).get(
        "/products", query={"page": 2, "brand": None, "search": "pixel"}, auth_token="tok"
    )

    request = seen["request"]
    assert result == {"ok": True}
    assert request.method == "GET"
    assert dict(request.url.params) == {"page": "2", "search": "pixel"}
    assert request.headers["Accept"] == "application/json"
    assert request.headers["Content-Type"] == "application/json"
    assert request.headers["Authorization"] == "Bearer tok"


@pytest.mark.asyncio
async def test_post_sends_json_body():
    seen = {}

    def handler(request):
        seen["body"] = json.loads(request.content)
        return httpx.Response(201, json={"data": {"id": "ord-1"}})

    result = await _client(handler).post("/orders", body={"items": [{"product_id": "1"}]})

    assert seen["body"] == {"items": [{"product_id": "1"}]}
    assert result == {"data": {"id": "ord-1"}}


@pytest.mark.asyncio
async def test_form_body_has_no_json_content_type():
    seen = {}

    def handler(request):
        seen["request"] = request
        return httpx.Response(200, json={})

    await _client(handler).post("/upload", body={"name": "x"}, is_form=True)

    content_type = seen["request"].headers["Content-Type"]
    assert content_type.startswith("application/x-www-form-urlencoded")
    assert seen["request"].content == b"name=x"


@pytest.mark.asyncio
async def test_empty_body_returns_none():
    result = await _client(lambda request: httpx.Response(204)).post("/logout")
    assert result is None


@pytest.mark.asyncio
async def test_non_json_body_returns_text():
    result = await _client(lambda request: httpx.Response(200, text="pong")).get("/ping")
    assert result == "pong"


@pytest.mark.asyncio
@pytest.mark.parametrize("body, expected", [
    ({"error": {"message": "Card declined", "type": "payment"}, "message": "ignored"}, "Card declined"),
    ({"message": "The given data was invalid."}, "The given data was invalid."),
    ({"unexpected": True}, "Request failed (500)"),
    (None, "Request failed (500)"),
])
async def test_error_message_precedence(body, expected):
    def handler(request):
        if body is None:
            return httpx.Response(500, text="<html>oops</html>")
        return httpx.Response(500, json=body)

    with pytest.raises(ApiError) as exc_info:
        await _client(handler).get("/orders")

    assert exc_info.value.status == 500
    assert exc_info.value.message == expected


@pytest.mark.asyncio
async def test_error_carries_type_and_validation_details():
    def handler(request):
        return httpx.Response(422, json={
            "message": "Invalid credentials",
            "errors": {"email": ["Invalid credentials"]},
        })

    with pytest.raises(ApiError) as exc_info:
        await _client(handler).post("/login", body={})

    assert exc_info.value.status == 422
    assert exc_info.value.details == {"email": ["Invalid credentials"]}


@pytest.mark.asyncio
async def test_transport_failure_is_api_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ApiError) as exc_info:
        await _client(handler).get("/products")

    assert exc_info.value.status == 0
    assert exc_info.value.type == "network_error"


def test_get_api_client_requires_base_url(monkeypatch):
    monkeypatch.setattr(api_client_module, "_api_client", None)
    monkeypatch.delenv("API_BASE_URL", raising=False)

    with pytest.raises(ValueError):
        get_api_client()


def test_get_api_client_singleton(monkeypatch):
    monkeypatch.setattr(api_client_module, "_api_client", None)
    monkeypatch.setenv("API_BASE_URL", "http://shop.test/api/")

    client = get_api_client()

    assert client is get_api_client()
    assert client.base_url == "http://shop.test/api"
