"""
Shop API Client

Thin async wrapper over the external REST API (catalog, auth, orders).
Every failure surfaces as ApiError so routers can map it to a response.
"""

import os
from typing import Any, Optional

import httpx

from storefront.errors import ApiError, ERROR_UPSTREAM_UNAVAILABLE
from storefront.logging import get_logger

logger = get_logger(__name__)

_api_client: Optional["ApiClient"] = None


def _safe_json(response: httpx.Response) -> Any:
    """Parsed JSON body, raw text when it is not JSON, None when empty."""
    text = response.text
    if not text:
        return None
    try:
        return response.json()
    except ValueError:
        return text


def _error_from_payload(payload: Any, status: int) -> ApiError:
    """Build ApiError from an error response body."""
    message = None
    error_type = None
    details = None
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict):
            message = error.get("message")
            error_type = error.get("type")
            details = error.get("details")
        message = message or payload.get("message")
        if isinstance(payload.get("errors"), dict):
            details = payload["errors"]
    if not message or not isinstance(message, str):
        message = f"Request failed ({status})"
    return ApiError(message, status, type=error_type, details=details)


class ApiClient:
    """
    Client for the shop REST API.

    Usage:
        client = ApiClient("https://shop.example.com/api")
        products = await client.get("/products", query={"page": 2})
        order = await client.post("/orders", body=payload, auth_token=token)
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not base_url:
            raise ValueError("API base URL must not be empty")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Lazy creation of shared httpx client with timeouts."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout, connect=5.0),
                limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
                transport=self._transport,
            )
        return self._http_client

    def build_url(self, path: str) -> str:
        normalized_path = path if path.startswith("/") else f"/{path}"
        return f"{self.base_url}{normalized_path}"

    async def request(
        self,
        path: str,
        method: str = "GET",
        query: Optional[dict[str, Any]] = None,
        body: Any = None,
        auth_token: Optional[str] = None,
        headers: Optional[dict[str, str]] = None,
        is_form: bool = False,
    ) -> Any:
        """
        Send a request and return the decoded body.

        Args:
            path: API path, with or without leading slash
            method: HTTP method
            query: Query parameters (None values are skipped)
            body: JSON-serializable body, or form fields when is_form
            auth_token: Bearer token
            headers: Extra headers
            is_form: Send body as form data instead of JSON

        Raises:
            ApiError: non-2xx response or transport failure
        """
        url = self.build_url(path)
        request_headers = {"Accept": "application/json"}
        if not is_form:
            request_headers["Content-Type"] = "application/json"
        request_headers.update(headers or {})
        if auth_token:
            request_headers["Authorization"] = f"Bearer {auth_token}"

        params = {key: value for key, value in (query or {}).items() if value is not None}

        kwargs: dict[str, Any] = {}
        if body is not None:
            if is_form:
                kwargs["data"] = body
            else:
                kwargs["json"] = body

        client = await self._get_http_client()
        try:
            response = await client.request(
                method.upper(), url, params=params, headers=request_headers, **kwargs
            )
        except httpx.HTTPError as e:
            logger.error("Shop API %s %s failed: %s", method.upper(), path, e)
            raise ApiError(ERROR_UPSTREAM_UNAVAILABLE, 0, type="network_error") from e

        payload = _safe_json(response)
        if not response.is_success:
            error = _error_from_payload(payload, response.status_code)
            logger.warning(
                "Shop API %s %s returned %s: %s",
                method.upper(), path, response.status_code, error.message,
            )
            raise error
        return payload

    async def get(self, path: str, **kwargs) -> Any:
        return await self.request(path, method="GET", **kwargs)

    async def post(self, path: str, **kwargs) -> Any:
        return await self.request(path, method="POST", **kwargs)

    async def put(self, path: str, **kwargs) -> Any:
        return await self.request(path, method="PUT", **kwargs)

    async def patch(self, path: str, **kwargs) -> Any:
        return await self.request(path, method="PATCH", **kwargs)

    async def delete(self, path: str, **kwargs) -> Any:
        return await self.request(path, method="DELETE", **kwargs)

    async def aclose(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None


def get_api_client() -> ApiClient:
    """
    Get ApiClient singleton.

    Reads API_BASE_URL (e.g. http://127.0.0.1:8000/api) and API_TIMEOUT.
    """
    global _api_client

    if _api_client is None:
        base_url = os.environ.get("API_BASE_URL", "")
        if not base_url:
            raise ValueError("API_BASE_URL must be set to the shop API root (e.g. http://127.0.0.1:8000/api)")
        timeout = float(os.environ.get("API_TIMEOUT", "10"))
        _api_client = ApiClient(base_url, timeout=timeout)

    return _api_client


async def close_api_client() -> None:
    """Close the shared client (application shutdown)."""
    global _api_client
    if _api_client is not None:
        await _api_client.aclose()
        _api_client = None
