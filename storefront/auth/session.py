"""Auth session: bearer token kept in storage, user fetched from the shop API."""
import asyncio
from typing import Any, Optional

from pydantic import ValidationError

from storefront.api_client import ApiClient
from storefront.db import KeyValueStorage, TTL
from storefront.errors import ApiError
from storefront.logging import get_logger
from storefront.models import User

logger = get_logger(__name__)


def _unwrap(payload: Any) -> Any:
    """Resource responses may wrap the object in {"data": ...}."""
    if isinstance(payload, dict) and isinstance(payload.get("data"), dict):
        return payload["data"]
    return payload


class AuthSession:
    """
    Per-browser auth state.

    The token lives in storage under `token_key`; `user` is only known
    after login() or hydrate() in the current request. Storage calls run
    in a worker thread since the Redis client is synchronous.
    """

    def __init__(self, storage: KeyValueStorage, token_key: str, client: ApiClient):
        self._storage = storage
        self._token_key = token_key
        self._client = client
        self._token: Optional[str] = None
        self._token_loaded = False
        self.user: Optional[User] = None
        self.initialized = False

    @property
    def token(self) -> Optional[str]:
        """Token read by the last load_token(), login() or hydrate()."""
        return self._token

    async def load_token(self) -> Optional[str]:
        if not self._token_loaded:
            self._token = await asyncio.to_thread(self._storage.get_item, self._token_key)
            self._token_loaded = True
        return self._token

    async def _forget_token(self) -> None:
        await asyncio.to_thread(self._storage.remove_item, self._token_key)
        self._token = None
        self._token_loaded = True

    async def login(self, email: str, password: str) -> dict[str, Any]:
        """
        Exchange credentials for a token.

        Raises:
            ApiError: credentials rejected or malformed response
        """
        data = await self._client.post("/login", body={"email": email, "password": password})
        token = data.get("token") if isinstance(data, dict) else None
        if not token:
            raise ApiError("Login response did not include a token", 502, type="invalid_response")

        await asyncio.to_thread(self._storage.set_item, self._token_key, token, ttl=TTL.TOKEN)
        self._token = token
        self._token_loaded = True
        try:
            self.user = User.model_validate(data.get("user")) if data.get("user") else None
        except ValidationError as e:
            logger.warning("Login returned an unreadable user: %s", e)
            self.user = None
        self.initialized = True
        return data

    async def logout(self) -> None:
        """Forget the token; the upstream logout call is best-effort."""
        token = await self.load_token()
        if token:
            try:
                await self._client.post("/logout", auth_token=token)
            except ApiError as e:
                logger.warning("Upstream logout failed: %s", e.message)
        await self._forget_token()
        self.user = None
        self.initialized = True

    async def fetch_me(self) -> Optional[User]:
        """Load the user for the stored token; an invalid token is dropped."""
        token = await self.load_token()
        if not token:
            self.user = None
            self.initialized = True
            return None

        try:
            payload = await self._client.get("/me", auth_token=token)
            self.user = User.model_validate(_unwrap(payload))
        except (ApiError, ValidationError) as e:
            logger.info("Dropping stored token: %s", e)
            await self._forget_token()
            self.user = None
        finally:
            self.initialized = True
        return self.user

    hydrate = fetch_me
