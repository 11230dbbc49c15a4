from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, List, Optional, Type, TypeVar
from urllib.parse import quote, urljoin

import requests
from pydantic import BaseModel, ValidationError

from .config import DEFAULT_PROXY_URL, HTTP_TIMEOUT, REQUEST_HEADERS
from .errors import NetworkTimeout, NetworkUnreachable, UploadFailed
from .schemas import FileListOut, FileOut, UploadData, UploadOut

logger = logging.getLogger("news_reader")

ModelT = TypeVar("ModelT", bound=BaseModel)


class UploadClient:
    """Client for the backend's file upload routes."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = HTTP_TIMEOUT,
        session: Optional[Any] = None,
    ):
        self.base_url = (base_url or DEFAULT_PROXY_URL).rstrip("/") + "/"
        self.timeout = timeout
        self.session = session or self._create_session()

    def _create_session(self) -> requests.Session:
        s = requests.Session()
        s.headers.update(REQUEST_HEADERS)
        return s

    def url_for(self, path: str) -> str:
        return urljoin(self.base_url, path.lstrip("/"))

    def file_url(self, filename: str) -> str:
        """Public URL the backend serves ``filename`` from."""
        return self.url_for(f"uploads/{quote(filename)}")

    def upload(self, path: str) -> UploadData:
        file_path = Path(path).expanduser()
        if not file_path.is_file():
            raise UploadFailed(f"No such file: {file_path}")
        with open(file_path, "rb") as fh:
            resp = self._request("post", "api/upload", files={"file": (file_path.name, fh)})
        body = self._parse(resp, UploadOut)
        if not body.success or body.data is None:
            raise UploadFailed(body.message)
        logger.info("Uploaded %s as %s", file_path, body.data.filename)
        return body.data

    def list_files(self) -> List[FileOut]:
        resp = self._request("get", "api/files")
        return self._parse(resp, FileListOut).files

    def delete(self, filename: str) -> None:
        resp = self._request("delete", f"api/upload/{quote(filename)}")
        body = self._parse(resp, UploadOut)
        if not body.success:
            raise UploadFailed(body.message)
        logger.info("Deleted upload %s", filename)

    def _request(self, method: str, path: str, **kwargs: Any):
        url = self.url_for(path)
        logger.debug("%s %s", method.upper(), url)
        try:
            return getattr(self.session, method)(url, timeout=self.timeout, **kwargs)
        except requests.Timeout as e:
            logger.warning("Backend timed out: %s", e)
            raise NetworkTimeout() from e
        except requests.RequestException as e:
            logger.warning("Backend unreachable: %s", e)
            raise NetworkUnreachable() from e

    @staticmethod
    def _parse(resp: Any, model: Type[ModelT]) -> ModelT:
        try:
            return model.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            logger.warning("Unexpected upload response %s", resp.status_code)
            raise UploadFailed(f"Server error: {resp.status_code}") from e
