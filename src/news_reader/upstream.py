from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests
from pydantic import ValidationError

from .config import (
    DEFAULT_LANGUAGE,
    DEFAULT_SORT_BY,
    HTTP_TIMEOUT,
    NEWS_API_URL,
    PAGE_SIZE,
    REQUEST_HEADERS,
)
from .errors import (
    NetworkTimeout,
    NetworkUnreachable,
    NewsError,
    UpstreamError,
    UpstreamMalformed,
    UpstreamRateLimited,
    UpstreamUnauthorized,
)
from .schemas import UpstreamErrorBody, UpstreamResponse

logger = logging.getLogger("news_reader")

# NewsAPI error codes that arrive with a non-429/401 status or inside a 200.
RATE_LIMIT_CODES = {"rateLimited"}
AUTH_CODES = {"apiKeyDisabled", "apiKeyExhausted", "apiKeyInvalid", "apiKeyMissing"}


class NewsApiClient:
    """Single-request client for the upstream search endpoint.

    Failures are never retried here; every one of them is raised as a
    :class:`~news_reader.errors.NewsError` subclass.
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = NEWS_API_URL,
        language: str = DEFAULT_LANGUAGE,
        sort_by: str = DEFAULT_SORT_BY,
        page_size: int = PAGE_SIZE,
        timeout: float = HTTP_TIMEOUT,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.language = language
        self.sort_by = sort_by
        self.page_size = page_size
        self.timeout = timeout
        self.session = self._create_session()

    def _create_session(self) -> requests.Session:
        s = requests.Session()
        s.headers.update(REQUEST_HEADERS)
        return s

    def build_params(self, query: str, page: int) -> Dict[str, Any]:
        return {
            "q": query,
            "language": self.language,
            "sortBy": self.sort_by,
            "pageSize": self.page_size,
            "page": page,
            "apiKey": self.api_key,
        }

    def search(self, query: str, page: int) -> UpstreamResponse:
        if not self.api_key:
            raise UpstreamUnauthorized("No news API key configured")

        logger.debug("Requesting upstream q=%r page=%d", query, page)
        try:
            resp = self.session.get(
                self.base_url, params=self.build_params(query, page), timeout=self.timeout
            )
        except requests.Timeout as e:
            logger.warning("Upstream timed out for q=%r page=%d: %s", query, page, e)
            raise NetworkTimeout() from e
        except requests.RequestException as e:
            logger.warning("Upstream unreachable for q=%r page=%d: %s", query, page, e)
            raise NetworkUnreachable() from e

        try:
            data = resp.json()
        except ValueError as e:
            if resp.status_code != 200:
                raise _error_for_status(resp.status_code, None, resp.reason) from e
            raise UpstreamMalformed("Upstream returned invalid JSON") from e

        if resp.status_code != 200 or (isinstance(data, dict) and data.get("status") == "error"):
            body = _parse_error_body(data)
            logger.warning(
                "Upstream error %s (%s): %s", resp.status_code, body.code, body.message
            )
            raise _error_for_status(resp.status_code, body.code, body.message)

        try:
            payload = UpstreamResponse.model_validate(data)
        except ValidationError as e:
            raise UpstreamMalformed("Upstream response is missing articles") from e
        if payload.status != "ok":
            raise UpstreamMalformed(f"Unexpected upstream status {payload.status!r}")
        logger.debug(
            "Upstream returned %d articles (total %d)", len(payload.articles), payload.totalResults
        )
        return payload


def _parse_error_body(data: Any) -> UpstreamErrorBody:
    if not isinstance(data, dict):
        return UpstreamErrorBody()
    try:
        return UpstreamErrorBody.model_validate(data)
    except ValidationError:
        return UpstreamErrorBody()


def _error_for_status(status: int, code: Optional[str], message: Optional[str]) -> NewsError:
    if status == 429 or code in RATE_LIMIT_CODES:
        return UpstreamRateLimited(message)
    if status == 401 or code in AUTH_CODES:
        return UpstreamUnauthorized(message)
    return UpstreamError(message, upstream_status=status)
