"""Pytest configuration and fixtures"""
import json
import os

import httpx
import pytest

# Set test environment variables
os.environ.setdefault("API_BASE_URL", "http://shop.test/api")
os.environ.pop("UPSTASH_REDIS_REST_URL", None)
os.environ.pop("UPSTASH_REDIS_REST_TOKEN", None)
os.environ.pop("CORS_ORIGINS", None)

from storefront.api_client import ApiClient  # noqa: E402
from storefront.db import MemoryStorage, set_storage  # noqa: E402


@pytest.fixture
def memory_storage():
    """Fresh in-memory storage installed as the process-wide storage."""
    storage = MemoryStorage()
    set_storage(storage)
    yield storage
    set_storage(None)


@pytest.fixture
def sample_product():
    """Sample catalog product"""
    return {
        "id": 42,
        "name": "Pixel 9 Pro",
        "brand": "Pixel",
        "category": "flagship",
        "price": "999.00",
        "image_url": "https://cdn.shop.test/pixel-9-pro.png",
    }


@pytest.fixture
def sample_user():
    """Sample customer as returned by /me"""
    return {
        "id": 7,
        "first_name": "Ada",
        "last_name": "Lovelace",
        "email": "ada@example.com",
        "role": "customer",
    }


@pytest.fixture
def sample_admin():
    """Sample administrator as returned by /me"""
    return {
        "id": 1,
        "first_name": "Grace",
        "last_name": "Hopper",
        "email": "grace@example.com",
        "role": "administrator",
    }


class FakeShopApi:
    """
    In-process stand-in for the external shop API.

    Serves a small catalog, token auth and order creation, and records
    every request it receives.
    """

    def __init__(self, products, users):
        self.products = {str(p["id"]): p for p in products}
        self.users = users  # token -> user dict
        self.requests: list[httpx.Request] = []
        self.orders: list[dict] = []
        self.fail_orders_with: int | None = None

    def _user_for(self, request: httpx.Request):
        header = request.headers.get("Authorization", "")
        if not header.startswith("Bearer "):
            return None
        return self.users.get(header[len("Bearer "):])

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/api")
        method = request.method

        if method == "GET" and path == "/products":
            items = list(self.products.values())
            return httpx.Response(200, json={
                "data": items,
                "meta": {"current_page": 1, "last_page": 1, "per_page": 12,
                         "total": len(items), "from": 1, "to": len(items)},
                "links": {"next": None},
            })

        if method == "GET" and path.startswith("/products/"):
            product = self.products.get(path.rsplit("/", 1)[-1])
            if product is None:
                return httpx.Response(404, json={"message": "No query results for model [Product]."})
            return httpx.Response(200, json={"data": product})

        if method == "POST" and path == "/login":
            body = json.loads(request.content)
            for token, user in self.users.items():
                if user["email"] == body.get("email") and body.get("password") == "secret":
                    return httpx.Response(200, json={"token": token, "user": user})
            return httpx.Response(422, json={"message": "Invalid credentials",
                                             "errors": {"email": ["Invalid credentials"]}})

        if method == "POST" and path == "/logout":
            return httpx.Response(204)

        user = self._user_for(request)
        if user is None:
            return httpx.Response(401, json={"message": "Unauthenticated."})

        if method == "GET" and path == "/me":
            return httpx.Response(200, json=user)

        if method == "POST" and path == "/orders":
            if self.fail_orders_with:
                return httpx.Response(self.fail_orders_with, json={"error": {"message": "Card declined", "type": "payment"}})
            order = {"id": f"ord-{len(self.orders) + 1}", **json.loads(request.content)}
            self.orders.append(order)
            return httpx.Response(201, json={"data": order})

        if method == "GET" and path == "/orders":
            return httpx.Response(200, json={"data": self.orders, "current_page": 1, "per_page": 10,
                                             "total": len(self.orders)})

        if method == "GET" and path in ("/admin/orders", "/users"):
            if user["role"] != "administrator":
                return httpx.Response(403, json={"message": "Forbidden"})
            return httpx.Response(200, json=[])

        return httpx.Response(404, json={"message": "Not found"})


@pytest.fixture
def fake_shop(sample_product, sample_user, sample_admin):
    """Fake shop API with one extra product and two accounts."""
    second = {"id": "43", "name": "Galaxy Z Fold", "brand": "Samsung", "price": 1799.5}
    return FakeShopApi(
        products=[sample_product, second],
        users={"customer-token": sample_user, "admin-token": sample_admin},
    )


@pytest.fixture
def shop_client(fake_shop):
    """ApiClient wired to the fake shop API."""
    return ApiClient("http://shop.test/api/", transport=httpx.MockTransport(fake_shop.handler))
