"""
HTTP Client.

Thin httpx wrapper the rest of the client core talks through. Every
request carries X-Frontend-ID: web, a fresh X-Request-ID that the server
echoes into its logs and error envelopes, and the session's bearer token
once one is set.
"""

from typing import Any
from uuid import uuid4

import httpx

from notekeeper.backend.core.config import get_server_base_url
from notekeeper.backend.core.logging import get_logger, log_with_source

logger = get_logger(__name__)

FRONTEND_ID = "web"


class APIClient:
    """
    Async client for the Notekeeper API.

    base_url and timeout default to application.yaml. Pass an
    httpx.ASGITransport to run against an in-process app.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if base_url is None or timeout is None:
            configured_url, configured_timeout = get_server_base_url()
            base_url = base_url or configured_url
            timeout = configured_timeout if timeout is None else timeout

        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._token: str | None = None
        self._client: httpx.AsyncClient | None = None

    @property
    def token(self) -> str | None:
        return self._token

    def set_token(self, token: str | None) -> None:
        self._token = token

    def _http(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers={"X-Frontend-ID": FRONTEND_ID},
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Release connections. The next request opens a new client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """
        Send one request and return the response whatever its status.

        Raises:
            httpx.HTTPError: The request never got a response
        """
        headers = {"X-Request-ID": str(uuid4()), **(kwargs.pop("headers", None) or {})}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        context = {"method": method, "path": path, "request_id": headers["X-Request-ID"]}

        log_with_source(logger, "client", "debug", "API request", **context)
        try:
            response = await self._http().request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            log_with_source(logger, "client", "error", "API request failed", error=str(e), **context)
            raise

        log_with_source(logger, "client", "debug", "API response", status_code=response.status_code, **context)
        return response

    async def get(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", path, **kwargs)

    async def patch(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("PATCH", path, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("DELETE", path, **kwargs)


def error_of(response: httpx.Response) -> tuple[str, str]:
    """(code, message) from an ErrorResponse body, tolerating non-envelope bodies."""
    fallback = f"HTTP {response.status_code}"
    try:
        body = response.json()
    except ValueError:
        return "SYS_UNKNOWN", response.text or fallback
    error = (body or {}).get("error") or {}
    return error.get("code", "SYS_UNKNOWN"), error.get("message", fallback)


def details_of(response: httpx.Response) -> dict:
    """The error envelope's details, or {} when the body has none."""
    try:
        body = response.json()
    except ValueError:
        return {}
    return ((body or {}).get("error") or {}).get("details") or {}


def data_of(response: httpx.Response) -> Any:
    return response.json().get("data")
