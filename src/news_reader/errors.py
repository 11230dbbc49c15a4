"""Errors raised while fetching news.

Every class carries the HTTP status the backend answers with, a stable code
used in the JSON error body, and the message shown to the user. The proxy
article source turns an error body back into the matching class through
:func:`error_from_code`.
"""

from __future__ import annotations

from typing import Dict, Optional, Type


class NewsError(Exception):
    status_code = 500
    code = "fetch_failed"
    user_message = "Failed to load news. Please try again later."

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.user_message)


class UpstreamRateLimited(NewsError):
    status_code = 429
    code = "rate_limited"
    user_message = "Rate limit exceeded. Please try again later."


class UpstreamUnauthorized(NewsError):
    status_code = 401
    code = "unauthorized"
    user_message = "The news API key is invalid or missing. Check the server configuration."


class UpstreamMalformed(NewsError):
    code = "malformed_response"


class UpstreamError(NewsError):
    code = "upstream_error"

    def __init__(self, message: Optional[str] = None, upstream_status: Optional[int] = None):
        super().__init__(message)
        self.upstream_status = upstream_status


class NetworkTimeout(NewsError):
    status_code = 503
    code = "network_timeout"
    user_message = "The news service did not respond in time. Check your connection and retry."


class NetworkUnreachable(NewsError):
    status_code = 503
    code = "network_unreachable"
    user_message = "Could not reach the news service. Check your connection and retry."


class UploadFailed(NewsError):
    """The backend refused a file operation; the message is the server's own."""

    status_code = 400
    code = "upload_failed"
    user_message = "The file operation failed."


ERROR_CODES: Dict[str, Type[NewsError]] = {
    cls.code: cls
    for cls in (
        UpstreamRateLimited,
        UpstreamUnauthorized,
        UpstreamMalformed,
        UpstreamError,
        NetworkTimeout,
        NetworkUnreachable,
    )
}

_STATUS_FALLBACK: Dict[int, Type[NewsError]] = {
    401: UpstreamUnauthorized,
    429: UpstreamRateLimited,
    503: NetworkUnreachable,
}


def error_from_code(code: Optional[str], message: Optional[str], status: int) -> NewsError:
    """Rebuild a typed error from a backend error body."""
    cls = ERROR_CODES.get(code or "") or _STATUS_FALLBACK.get(status, UpstreamError)
    return cls(message)
