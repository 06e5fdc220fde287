"""Helpers for reading :class:`httpx.Response` bodies returned by the REST API."""

from __future__ import annotations

from typing import Any, Optional

import httpx


def extract_response_data(response: httpx.Response) -> Any:
    """Extract the body from an HTTP response.

    Attempts to parse the body as JSON first. If that fails (e.g. an HTML
    error page from a proxy), returns the raw text. Returns ``None`` for
    responses with no content, such as ``204 No Content``.
    """
    if not response.content:
        return None

    try:
        return response.json()
    except ValueError:
        return response.text


def error_details(response: httpx.Response) -> tuple[str, Optional[int]]:
    """Return ``(message, api_error_code)`` for an error response.

    The platform reports errors as ``{"code": 10008, "message": "Unknown
    Message"}``; other shapes fall back to a truncated text preview.
    """
    data = extract_response_data(response)
    if isinstance(data, dict):
        msg = data.get("message") or data.get("error") or ""
        code = data.get("code")
        return str(msg), code if isinstance(code, int) else None
    if data is None:
        return "", None
    return str(data)[:200], None


def retry_after(response: httpx.Response) -> float:
    """Seconds to wait before retrying a rate-limited request."""
    data = extract_response_data(response)
    if isinstance(data, dict) and "retry_after" in data:
        try:
            return max(float(data["retry_after"]), 0.0)
        except (TypeError, ValueError):
            pass
    try:
        return max(float(response.headers.get("Retry-After", 0)), 0.0)
    except ValueError:
        return 0.0
