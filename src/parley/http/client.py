"""Asynchronous REST transport backed by :class:`httpx.AsyncClient`.

:class:`HTTPClient` is the only component that talks to the network. It
injects the bot token, the audit-log reason header and the user agent,
retries connection failures and 5xx responses with exponential backoff,
and maps error statuses to the typed exceptions in :mod:`parley.exceptions`.

Rate limits are reported, not handled: a 429 raises
:class:`~parley.exceptions.RateLimitedError` carrying ``retry_after`` and
the caller decides what to do.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx

from parley.exceptions import (
    ConnectionError_,
    ForbiddenError,
    HTTPError,
    NotFoundError,
    RateLimitedError,
    ServerError,
    UnauthorizedError,
)
from parley.http.response import error_details, extract_response_data, retry_after
from parley.models import DEFAULT_BASE_URL, RequestConfig

logger = logging.getLogger(__name__)

AUDIT_LOG_REASON_HEADER = "X-Audit-Log-Reason"


class HTTPClient:
    """Asynchronous HTTP client for REST API calls.

    Must be used as an async context manager (or opened with :meth:`open`
    and closed with :meth:`close`).

    Args:
        token: Bot token sent as ``Authorization: Bot <token>``. ``None``
            sends no authorization header.
        base_url: API root every request path is appended to.
        request_config: Timeout, retry and user-agent settings.
        transport: Optional custom :mod:`httpx` transport (tests use
            :class:`httpx.MockTransport`).

    Example::

        async with HTTPClient(token) as http:
            resp, data = await http.get("/channels/123/messages/456")
    """

    def __init__(
        self,
        token: Optional[str] = None,
        *,
        base_url: str = DEFAULT_BASE_URL,
        request_config: Optional[RequestConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._token = token
        self._base_url = base_url.rstrip("/")
        self._config = request_config or RequestConfig()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    @property
    def is_open(self) -> bool:
        return self._client is not None

    def open(self) -> None:
        if self._client is not None:
            return
        headers = {"User-Agent": self._config.user_agent}
        if self._token:
            headers["Authorization"] = f"Bot {self._token}"
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._config.timeout,
            headers=headers,
            transport=self._transport,
        )

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> HTTPClient:
        self.open()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()

    # ------------------------------------------------------------------ #
    # Public request methods
    # ------------------------------------------------------------------ #

    async def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        *,
        headers: Optional[dict[str, str]] = None,
        params: Optional[dict[str, Any]] = None,
        data: Optional[dict[str, str]] = None,
        files: Optional[list[Any]] = None,
        audit_log_reason: Optional[str] = None,
    ) -> tuple[httpx.Response, Any]:
        """Make a request with retry and error mapping.

        Args:
            method: HTTP method (GET, POST, PUT, PATCH, DELETE).
            path: URL path appended to the base URL.
            body: ``bytes`` are sent as-is with the caller's content-type;
                any other non-``None`` value is sent as JSON.
            headers: Extra request headers.
            params: Query parameters.
            data: Form fields. Together with *files* the request is sent as
                ``multipart/form-data``, encoded by httpx.
            files: httpx ``files`` entries, ``(field, (filename, content, content_type))``.
            audit_log_reason: Reason recorded in the guild audit log.

        Returns:
            ``(response, data)`` where *data* is the decoded JSON body, or
            ``None`` for empty responses.

        Raises:
            UnauthorizedError: On 401.
            ForbiddenError: On 403.
            NotFoundError: On 404.
            RateLimitedError: On 429.
            ServerError: On 5xx after all retries are exhausted.
            HTTPError: On any other 4xx.
            ConnectionError_: On network / timeout errors after all retries.
        """
        merged_headers: dict[str, str] = dict(headers or {})
        if audit_log_reason is not None:
            merged_headers[AUDIT_LOG_REASON_HEADER] = quote(audit_log_reason, safe=" ")

        response = await self._execute_with_retry(
            method, path, merged_headers, params or {}, body, data, files,
        )
        logger.debug("%s %s -> %d", method, path, response.status_code)
        self._map_response_error(response, method, path)
        return response, extract_response_data(response)

    async def get(self, path: str, **kwargs: Any) -> tuple[httpx.Response, Any]:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, body: Any = None, **kwargs: Any) -> tuple[httpx.Response, Any]:
        return await self.request("POST", path, body, **kwargs)

    async def put(self, path: str, body: Any = None, **kwargs: Any) -> tuple[httpx.Response, Any]:
        return await self.request("PUT", path, body, **kwargs)

    async def patch(self, path: str, body: Any = None, **kwargs: Any) -> tuple[httpx.Response, Any]:
        return await self.request("PATCH", path, body, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> tuple[httpx.Response, Any]:
        return await self.request("DELETE", path, **kwargs)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    async def _execute_with_retry(
        self,
        method: str,
        path: str,
        headers: dict[str, str],
        params: dict[str, Any],
        body: Any,
        data: Optional[dict[str, str]] = None,
        files: Optional[list[Any]] = None,
    ) -> httpx.Response:
        """Execute the request, retrying 5xx and connection errors.

        The delay doubles each attempt: 1 s, 2 s, 4 s, ...
        """
        assert self._client is not None, "Client not initialised -- use as async context manager"

        max_retries = self._config.max_retries
        kwargs: dict[str, Any] = {
            "method": method,
            "url": path,
            "headers": headers,
            "params": params,
        }
        if isinstance(body, bytes):
            kwargs["content"] = body
        elif body is not None:
            kwargs["json"] = body
        if data is not None:
            kwargs["data"] = data
        if files is not None:
            kwargs["files"] = files

        for attempt in range(max_retries + 1):
            try:
                response = await self._client.request(**kwargs)
            except (httpx.ConnectError, httpx.TimeoutException, httpx.NetworkError) as exc:
                if attempt < max_retries:
                    delay = 2 ** attempt
                    logger.warning(
                        "Connection error on %s %s: %s, retrying in %ds (attempt %d/%d)",
                        method, path, exc, delay, attempt + 1, max_retries,
                    )
                    await asyncio.sleep(delay)
                    continue
                raise ConnectionError_(
                    f"Connection failed after {max_retries + 1} attempts: {exc}"
                ) from exc

            if response.status_code >= 500 and attempt < max_retries:
                delay = 2 ** attempt
                logger.warning(
                    "Server error %d on %s %s, retrying in %ds (attempt %d/%d)",
                    response.status_code, method, path, delay, attempt + 1, max_retries,
                )
                await asyncio.sleep(delay)
                continue

            return response

        raise ServerError("Request failed after all retries", status=0)  # pragma: no cover

    def _map_response_error(self, response: httpx.Response, method: str, path: str) -> None:
        """Raise a typed exception for error HTTP status codes."""
        status = response.status_code
        if status < 400:
            return

        msg, code = error_details(response)
        prefix = f"HTTP {status} on {method} {path}"
        full_msg = f"{prefix}: {msg}" if msg else prefix
        kwargs: dict[str, Any] = {"status": status, "code": code, "response": response}

        if status == 401:
            raise UnauthorizedError(full_msg, **kwargs)
        if status == 403:
            raise ForbiddenError(full_msg, **kwargs)
        if status == 404:
            raise NotFoundError(full_msg, **kwargs)
        if status == 429:
            raise RateLimitedError(full_msg, retry_after=retry_after(response), **kwargs)
        if status >= 500:
            raise ServerError(full_msg, **kwargs)
        raise HTTPError(full_msg, **kwargs)
