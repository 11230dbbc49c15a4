from __future__ import annotations

import logging
from typing import Any, Dict
from urllib.parse import urljoin

import requests
from pydantic import ValidationError

from ..config import DEFAULT_PROXY_URL, HTTP_TIMEOUT, REQUEST_HEADERS
from ..datamodels import Page
from ..errors import (
    NetworkTimeout,
    NetworkUnreachable,
    UpstreamMalformed,
    error_from_code,
)
from ..normalizer import normalize_page
from ..schemas import ErrorOut, UpstreamResponse
from .base import ArticleSource

logger = logging.getLogger("news_reader")


class ProxySource(ArticleSource):
    """Reads pages from the backend's ``/api/news`` endpoint."""

    def __init__(self, config: Dict[str, Any]):
        super().__init__(config)
        self.base_url = self.config.get("base_url") or DEFAULT_PROXY_URL
        self.timeout = self.config.get("timeout", HTTP_TIMEOUT)
        self.session = self._create_session()

    def _create_session(self) -> requests.Session:
        s = requests.Session()
        s.headers.update(REQUEST_HEADERS)
        return s

    @property
    def news_url(self) -> str:
        return urljoin(self.base_url.rstrip("/") + "/", "api/news")

    def fetch_page(self, query: str, page: int) -> Page:
        logger.debug("Fetching %s query=%r page=%d", self.news_url, query, page)
        try:
            resp = self.session.get(
                self.news_url, params={"query": query, "page": page}, timeout=self.timeout
            )
        except requests.Timeout as e:
            logger.warning("Backend timed out: %s", e)
            raise NetworkTimeout() from e
        except requests.RequestException as e:
            logger.warning("Backend unreachable: %s", e)
            raise NetworkUnreachable() from e

        if resp.status_code != 200:
            raise self._error_from_response(resp)

        try:
            payload = UpstreamResponse.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            raise UpstreamMalformed("Backend returned an invalid news payload") from e
        if payload.status != "ok":
            raise UpstreamMalformed(f"Unexpected status {payload.status!r}")

        logger.debug(
            "Page %d: %d articles (X-Cache=%s)",
            page,
            len(payload.articles),
            resp.headers.get("X-Cache", "-"),
        )
        return normalize_page(payload, page)

    @staticmethod
    def _error_from_response(resp: requests.Response):
        try:
            body = ErrorOut.model_validate(resp.json())
            code, message = body.error, body.message
        except (ValueError, ValidationError):
            code, message = None, None
        logger.warning("Backend answered %d (%s): %s", resp.status_code, code, message)
        return error_from_code(code, message, resp.status_code)
