"""
HTTP Transport.

Performs a single call to the remote notes service. Knows nothing about
credentials or retries; that is the session manager's job.
All requests include X-Client-ID: notu for server-side log routing.
"""

from typing import Any

import httpx

from notu.core.exceptions import NetworkError
from notu.core.logging import get_logger, log_with_source

logger = get_logger(__name__)

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
    "X-Client-ID": "notu",
}


def decode_body(response: httpx.Response) -> Any:
    """
    Parse a JSON response body.

    Returns:
        Decoded JSON, or None for an empty body (e.g. 204)
    """
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None


def decode_error(response: httpx.Response) -> tuple[str | None, str | None]:
    """
    Extract the server-supplied message and error code from a failed response.

    Accepts `{"message": ...}`, `{"error": ...}` and `{"code": ...}` bodies.

    Returns:
        (message, code); either is None when the body does not carry it
    """
    body = decode_body(response)
    if not isinstance(body, dict):
        return None, None

    message = body.get("message")
    if not isinstance(message, str) or not message:
        error = body.get("error")
        message = error if isinstance(error, str) and error else None

    code = body.get("code")
    return message, code if isinstance(code, str) else None


class HttpTransport:
    """
    HTTP transport for the notes service.

    Features:
    - Base URL and timeout from configuration
    - JSON headers on every call
    - Structured logging of requests/responses
    - Transport failures surface as NetworkError; HTTP statuses are returned

    Usage:
        transport = HttpTransport("http://localhost:5000/api")
        response = await transport.get("/notes")
        response = await transport.post("/notes", json={"title": "test"})
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the transport.

        Args:
            base_url: Service base URL, e.g. http://localhost:5000/api
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=DEFAULT_HEADERS,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def request(
        self,
        method: str,
        path: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """
        Make one HTTP request.

        Args:
            method: HTTP method (GET, POST, etc.)
            path: API path (e.g., /notes, /auth/me)
            **kwargs: Additional arguments for httpx (json, params, headers)

        Returns:
            httpx.Response, whatever its status

        Raises:
            NetworkError: When no response was received
        """
        client = await self._get_client()

        log_with_source(
            logger,
            "client",
            "debug",
            "API request",
            method=method,
            path=path,
        )

        try:
            response = await client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            log_with_source(
                logger,
                "client",
                "warning",
                "API request failed",
                method=method,
                path=path,
                error=str(e),
            )
            raise NetworkError(f"Could not reach server: {e.__class__.__name__}") from e

        log_with_source(
            logger,
            "client",
            "debug",
            "API response",
            method=method,
            path=path,
            status_code=response.status_code,
        )
        return response

    async def get(self, path: str, **kwargs: Any) -> httpx.Response:
        """Make a GET request."""
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> httpx.Response:
        """Make a POST request."""
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> httpx.Response:
        """Make a PUT request."""
        return await self.request("PUT", path, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> httpx.Response:
        """Make a DELETE request."""
        return await self.request("DELETE", path, **kwargs)
