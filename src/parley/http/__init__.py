"""REST transport for parley.

:class:`HTTPClient` wraps :class:`httpx.AsyncClient` with token injection,
audit-log reasons, retry with exponential backoff on connection errors and
5xx, and mapping of error statuses to :mod:`parley.exceptions`.
"""

from parley.http.client import AUDIT_LOG_REASON_HEADER, HTTPClient

__all__ = ["HTTPClient", "AUDIT_LOG_REASON_HEADER"]
