#!/usr/bin/env python3
# -*- coding: utf-8 -*-
from __future__ import annotations

import argparse
import logging
import sys

from .config import load_config, setup_logging, setup_server_logging
from .sources.manager import AVAILABLE_SOURCES

logger = logging.getLogger("news_reader")


# --- Entrypoints ---
def main() -> None:
    parser = argparse.ArgumentParser(description="News Reader terminal client")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--source",
        choices=sorted(AVAILABLE_SOURCES),
        help="Where to read articles from (overrides the config file)",
    )
    parser.add_argument("--base-url", help="Backend URL for the proxy source")
    parser.add_argument("--query", help="Initial search query")
    args = parser.parse_args()

    debug_path = setup_logging(args.debug)
    if debug_path:
        print(f"Debug logging enabled: {debug_path}", file=sys.stderr)

    config = load_config()
    if args.source:
        config["source"] = args.source
    if args.base_url:
        config.setdefault("sources", {}).setdefault("proxy", {})["base_url"] = args.base_url

    logger.info("Using article source: %s", config.get("source", "proxy"))

    from .app import NewsReaderApp

    try:
        app = NewsReaderApp(config=config, initial_query=args.query)
        app.run()
    except Exception as e:
        logger.exception("Application crashed: %s", e)
        print(f"Application crashed: {e}", file=sys.stderr)


def serve() -> None:
    import uvicorn

    from .settings import settings

    parser = argparse.ArgumentParser(description="News Reader backend proxy")
    parser.add_argument("--host", default=settings.API_HOST, help="Interface to bind")
    parser.add_argument("--port", type=int, default=settings.API_PORT, help="Port to listen on")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    setup_server_logging(logging.DEBUG if args.debug else logging.INFO)
    if not settings.NEWS_API_KEY:
        logger.warning("NEWS_API_KEY is not set; /api/news will answer 401")

    logger.info("Proxy server running on http://%s:%d", args.host, args.port)
    uvicorn.run("news_reader.server:app", host=args.host, port=args.port, log_level="info")


if __name__ == "__main__":
    main()
