"""Tests for auth session and route guard"""
import threading

import pytest

from storefront.auth import AuthSession, RouteGuard
from storefront.db import MemoryStorage
from storefront.errors import ApiError
from storefront.models import User

TOKEN_KEY = "pulse-token:test"


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def session(storage, shop_client):
    return AuthSession(storage, TOKEN_KEY, shop_client)


class TestAuthSession:

    @pytest.mark.asyncio
    async def test_login_stores_token_and_user(self, session, storage):
        data = await session.login("ada@example.com", "secret")

        assert data["token"] == "customer-token"
        assert storage.get_item(TOKEN_KEY) == "customer-token"
        assert session.user.email == "ada@example.com"
        assert session.user.id == "7"
        assert session.initialized is True

    @pytest.mark.asyncio
    async def test_login_rejected(self, session, storage):
        with pytest.raises(ApiError) as exc_info:
            await session.login("ada@example.com", "wrong")

        assert exc_info.value.status == 422
        assert exc_info.value.message == "Invalid credentials"
        assert storage.get_item(TOKEN_KEY) is None

    @pytest.mark.asyncio
    async def test_logout_removes_token(self, session, storage, fake_shop):
        await session.login("ada@example.com", "secret")
        await session.logout()

        assert storage.get_item(TOKEN_KEY) is None
        assert session.user is None
        logout_calls = [r for r in fake_shop.requests if r.url.path.endswith("/logout")]
        assert logout_calls[0].headers["Authorization"] == "Bearer customer-token"

    @pytest.mark.asyncio
    async def test_logout_survives_upstream_failure(self, storage):
        class _BrokenClient:
            async def post(self, *args, **kwargs):
                raise ApiError("down", 503)

        storage.set_item(TOKEN_KEY, "tok")
        session = AuthSession(storage, TOKEN_KEY, _BrokenClient())

        await session.logout()

        assert storage.get_item(TOKEN_KEY) is None

    @pytest.mark.asyncio
    async def test_hydrate_without_token(self, session, fake_shop):
        user = await session.hydrate()

        assert user is None
        assert session.initialized is True
        assert fake_shop.requests == []

    @pytest.mark.asyncio
    async def test_hydrate_with_valid_token(self, session, storage):
        storage.set_item(TOKEN_KEY, "admin-token")

        user = await session.fetch_me()

        assert user.is_admin is True
        assert session.token == "admin-token"

    @pytest.mark.asyncio
    async def test_hydrate_with_invalid_token_drops_it(self, session, storage):
        storage.set_item(TOKEN_KEY, "expired")

        user = await session.fetch_me()

        assert user is None
        assert storage.get_item(TOKEN_KEY) is None
        assert session.initialized is True


class TestRouteGuard:

    customer = User(id="7", email="ada@example.com", role="customer")
    admin = User(id="1", email="grace@example.com", role="administrator")

    def test_not_initialized_is_pending(self):
        decision = RouteGuard(require_auth=True).evaluate(None, initialized=False, pathname="/orders")

        assert decision.allowed is False
        assert decision.pending is True
        assert decision.redirect is None

    def test_anonymous_redirected_to_login(self):
        decision = RouteGuard(require_auth=True).evaluate(None, initialized=True, pathname="/orders/5")

        assert decision.allowed is False
        assert decision.pending is True
        assert decision.redirect == "/login?redirect=%2Forders%2F5"

    def test_custom_redirect(self):
        guard = RouteGuard(require_auth=True, redirect_to="/signup")
        assert guard.evaluate(None, initialized=True).redirect == "/signup"

    def test_wrong_role_redirected_home(self):
        guard = RouteGuard(require_auth=True, require_role="administrator")
        decision = guard.evaluate(self.customer, initialized=True, pathname="/admin")

        assert decision.allowed is False
        assert decision.redirect == "/"

    def test_matching_role_allowed(self):
        guard = RouteGuard(require_auth=True, require_role="administrator")
        decision = guard.evaluate(self.admin, initialized=True, pathname="/admin")

        assert decision.allowed is True
        assert decision.pending is False
        assert decision.redirect is None

    def test_public_route_allows_anyone(self):
        decision = RouteGuard().evaluate(None, initialized=True)
        assert decision.allowed is True
        assert decision.pending is False


class _ThreadRecordingStorage(MemoryStorage):
    """Remembers which threads touched it."""

    def __init__(self):
        super().__init__()
        self.threads = set()

    def get_item(self, key):
        self.threads.add(threading.get_ident())
        return super().get_item(key)

    def set_item(self, key, value, ttl=None):
        self.threads.add(threading.get_ident())
        super().set_item(key, value, ttl=ttl)

    def remove_item(self, key):
        self.threads.add(threading.get_ident())
        super().remove_item(key)


class TestStorageOffEventLoop:

    @pytest.mark.asyncio
    async def test_login_hydrate_logout_do_not_block_loop(self, shop_client):
        storage = _ThreadRecordingStorage()
        loop_thread = threading.get_ident()

        await AuthSession(storage, TOKEN_KEY, shop_client).login("ada@example.com", "secret")
        session = AuthSession(storage, TOKEN_KEY, shop_client)
        await session.hydrate()
        await session.logout()

        assert storage.threads
        assert loop_thread not in storage.threads

    @pytest.mark.asyncio
    async def test_invalid_token_dropped_off_loop(self, shop_client):
        storage = _ThreadRecordingStorage()
        storage.set_item(TOKEN_KEY, "expired")
        storage.threads.clear()

        await AuthSession(storage, TOKEN_KEY, shop_client).fetch_me()
        touched = set(storage.threads)

        assert touched
        assert threading.get_ident() not in touched
        assert storage.get_item(TOKEN_KEY) is None

    @pytest.mark.asyncio
    async def test_token_is_read_once_per_session(self, storage, shop_client):
        storage.set_item(TOKEN_KEY, "customer-token")
        session = AuthSession(storage, TOKEN_KEY, shop_client)

        assert session.token is None
        await session.hydrate()
        storage.remove_item(TOKEN_KEY)

        assert session.token == "customer-token"
