from __future__ import annotations

import logging
import os
import time
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path
from typing import Optional

from fastapi import Depends, FastAPI, File, HTTPException, Query, Request, Response, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse

from .cache import ResponseCache
from .errors import NewsError
from .proxy import NewsProxy
from .schemas import FileListOut, FileOut, UploadData, UploadOut
from .settings import Settings, settings as default_settings
from .upstream import NewsApiClient

logger = logging.getLogger("news_reader")

UPLOAD_CHUNK_SIZE = 1024 * 1024

app = FastAPI(title="News Reader Proxy")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


def get_settings() -> Settings:
    return default_settings


def build_proxy(s: Settings) -> NewsProxy:
    client = NewsApiClient(
        api_key=s.NEWS_API_KEY,
        base_url=s.NEWS_API_BASE_URL,
        language=s.NEWS_LANGUAGE,
        sort_by=s.NEWS_SORT_BY,
        timeout=s.UPSTREAM_TIMEOUT_SECONDS,
    )
    cache = ResponseCache(ttl=s.CACHE_TTL_SECONDS, max_entries=s.CACHE_MAX_ENTRIES)
    return NewsProxy(client, cache)


@lru_cache(maxsize=1)
def get_proxy() -> NewsProxy:
    # One proxy per process so every request shares the cache.
    return build_proxy(get_settings())


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info("%s %s", request.method, request.url.path)
    return await call_next(request)


@app.exception_handler(NewsError)
async def news_error_handler(request: Request, exc: NewsError) -> JSONResponse:
    logger.error("News request failed (%s): %s", exc.code, exc)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code, "message": str(exc)},
    )


@app.get("/api/news")
def get_news(
    response: Response,
    query: str = Query(""),
    page: int = Query(1, ge=1),
    proxy: NewsProxy = Depends(get_proxy),
):
    result = proxy.get(query, page)
    response.headers["X-Cache"] = result.cache_status
    return result.payload


def _upload_dir(s: Settings) -> Path:
    path = Path(s.UPLOAD_DIR)
    path.mkdir(parents=True, exist_ok=True)
    return path


def _resolve_upload(s: Settings, filename: str) -> Path:
    if not filename or Path(filename).name != filename or filename.startswith("."):
        raise HTTPException(status_code=404, detail="File not found")
    path = _upload_dir(s) / filename
    if not path.is_file():
        raise HTTPException(status_code=404, detail="File not found")
    return path


def _failure(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=UploadOut(success=False, message=message).model_dump(exclude_none=True),
    )


def _store_upload(src, dest: Path, limit: int) -> int:
    """Copy ``src`` into ``dest``, stopping once more than ``limit`` bytes arrive."""
    size = 0
    with open(dest, "wb") as out:
        while chunk := src.read(UPLOAD_CHUNK_SIZE):
            size += len(chunk)
            if size > limit:
                break
            out.write(chunk)
    return size


@app.post("/api/upload", response_model=UploadOut, response_model_exclude_none=True)
def upload_file(
    file: Optional[UploadFile] = File(None),
    s: Settings = Depends(get_settings),
):
    if file is None or not file.filename:
        return _failure(400, "No file uploaded")
    name = Path(file.filename).name.lstrip(".")
    if not name:
        return _failure(400, "Invalid file name")

    stored = f"{int(time.time() * 1000)}-{name}"
    dest = _upload_dir(s) / stored
    try:
        size = _store_upload(file.file, dest, s.MAX_UPLOAD_BYTES)
    except OSError:
        dest.unlink(missing_ok=True)
        logger.exception("Could not store upload %s", name)
        return _failure(500, "Failed to store file")
    if size > s.MAX_UPLOAD_BYTES:
        dest.unlink()
        logger.warning("Rejected upload %s: larger than %d bytes", name, s.MAX_UPLOAD_BYTES)
        return _failure(413, "File is too large")

    logger.info("Stored upload %s (%d bytes)", stored, size)
    return UploadOut(
        success=True,
        message="File uploaded successfully",
        data=UploadData(url=f"/uploads/{stored}", filename=stored, size=size),
    )


@app.delete("/api/upload/{filename}", response_model=UploadOut, response_model_exclude_none=True)
def delete_file(filename: str, s: Settings = Depends(get_settings)):
    try:
        path = _resolve_upload(s, filename)
    except HTTPException:
        return _failure(404, "File not found")
    os.unlink(path)
    logger.info("Deleted upload %s", filename)
    return UploadOut(success=True, message="File deleted successfully")


@app.get("/api/files", response_model=FileListOut)
def list_files(s: Settings = Depends(get_settings)):
    files = [
        FileOut(filename=p.name, size=p.stat().st_size)
        for p in sorted(_upload_dir(s).iterdir())
        if p.is_file()
    ]
    return FileListOut(success=True, files=files)


@app.get("/uploads/{filename}")
def serve_upload(filename: str, s: Settings = Depends(get_settings)):
    path = _resolve_upload(s, filename)
    return FileResponse(path, filename=filename, content_disposition_type="inline")


@app.get("/healthz")
def healthz():
    return {"status": "ok", "time": datetime.now(timezone.utc).isoformat()}
