"""Exception hierarchy for parley.

All exceptions inherit from :class:`ParleyError`. Errors raised by the REST
transport derive from :class:`HTTPError` and carry the HTTP status, the
API's numeric error code (when the body provides one), and the raw
:class:`httpx.Response`. The messaging layer never catches them -- callers
inspect the concrete subclass to tell retryable conditions (rate limits,
5xx) from permanent ones.

Subclass hierarchy::

    ParleyError
    +-- DeclarationError            (also ValueError)
    +-- InvalidUsageError           (also ValueError)
    +-- ExtensionError
    +-- ConfigError
    +-- UnsupportedCapabilityError  (also NotImplementedError)
    +-- ConnectionError_
    +-- HTTPError
        +-- UnauthorizedError   (401)
        +-- ForbiddenError      (403)
        +-- NotFoundError       (404)
        +-- RateLimitedError    (429)
        +-- ServerError         (5xx)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    import httpx


class ParleyError(Exception):
    """Base exception for all parley errors."""


class DeclarationError(ParleyError, ValueError):
    """Raised when an event or command declaration is malformed.

    Raised synchronously at extension-definition time, e.g. for an event
    name that is not a lowercase identifier or a missing handler body.
    """


class InvalidUsageError(ParleyError, ValueError):
    """Raised when mutually exclusive arguments are combined (``embed`` and ``embeds``, ...)."""


class ExtensionError(ParleyError):
    """Raised when an extension fails to load or unload."""


class ConfigError(ParleyError):
    """Raised for configuration problems (invalid JSON, missing token, bad credential source)."""


class UnsupportedCapabilityError(ParleyError, NotImplementedError):
    """Raised by capabilities this library deliberately does not provide (e.g. voice)."""


class ConnectionError_(ParleyError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """


class HTTPError(ParleyError):
    """Raised when the API answers with a non-2xx status.

    Args:
        message: Human-readable error description.
        status: HTTP status code of the response.
        code: The API's numeric error code from the JSON body, if any.
        response: The raw response object.
    """

    def __init__(
        self,
        message: str,
        *,
        status: int,
        code: Optional[int] = None,
        response: Optional[httpx.Response] = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.code = code
        self.response = response


class UnauthorizedError(HTTPError):
    """Raised on HTTP 401 (invalid or missing token)."""


class ForbiddenError(HTTPError):
    """Raised on HTTP 403 (missing permissions)."""


class NotFoundError(HTTPError):
    """Raised on HTTP 404 (unknown channel, message, ...)."""


class RateLimitedError(HTTPError):
    """Raised on HTTP 429. ``retry_after`` is the server-suggested delay in seconds."""

    def __init__(self, message: str, *, retry_after: float = 0.0, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.retry_after = retry_after


class ServerError(HTTPError):
    """Raised on HTTP 5xx after all retries are exhausted."""
