from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime
from typing import Any, Dict, Optional

# --- Configuration ---
PAGE_SIZE = 10
MAX_RESULTS = 100
HTTP_TIMEOUT = 10
DEFAULT_QUERY = "technology"
DEFAULT_PROXY_URL = "http://localhost:3001"

NEWS_API_URL = "https://newsapi.org/v2/everything"
DEFAULT_LANGUAGE = "en"
DEFAULT_SORT_BY = "publishedAt"
CACHE_TTL = 5 * 60

PLACEHOLDER_DESCRIPTION = "No description available"
PLACEHOLDER_IMAGE_URL = "https://via.placeholder.com/345x140"
PLACEHOLDER_AUTHOR = "Unknown author"
PLACEHOLDER_TITLE = "Untitled"
PLACEHOLDER_SOURCE = "Unknown source"

CONFIG_PATH = os.path.expanduser("~/.config/news_reader/config.json")

REQUEST_HEADERS = {"User-Agent": "news-reader/0.1 (+https://newsapi.org)"}

# Default UI settings
UI_DEFAULTS = {
    "statusbar_keybindings": (
        "[b cyan]/[/] search  [b cyan]ctrl+f[/] filters  "
        "[b cyan]f[/] favorite  [b cyan]F[/] favorites  [b cyan]u[/] uploads"
    ),
}

DEFAULT_CONFIG: Dict[str, Any] = {
    "source": "proxy",
    "default_query": DEFAULT_QUERY,
    "sources": {
        "proxy": {"base_url": DEFAULT_PROXY_URL, "timeout": HTTP_TIMEOUT},
        "direct": {
            "api_key": None,
            "base_url": NEWS_API_URL,
            "language": DEFAULT_LANGUAGE,
            "cache_ttl": CACHE_TTL,
        },
    },
    "ui": UI_DEFAULTS,
}

# --- Logging ---
logger = logging.getLogger("news_reader")

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def setup_logging(debug: bool = False) -> Optional[str]:
    """Configure client logging.

    The terminal belongs to the UI, so records only go to a file and only
    when debugging.
    """
    if not debug:
        logging.basicConfig(level=logging.CRITICAL, handlers=[logging.NullHandler()])
        return None

    ts = datetime.now().strftime("%Y%m%dT%H%M%S")
    pid = os.getpid()
    debug_path = f"/tmp/news_reader_debug_{ts}_{pid}.log"

    logging.basicConfig(
        level=logging.DEBUG,
        filename=debug_path,
        filemode="a",
        format=LOG_FORMAT,
    )

    logger.debug("Debug logging enabled to %s", debug_path)
    return debug_path


def setup_server_logging(level: int = logging.INFO) -> None:
    """Configure backend logging to stderr."""
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)


def ensure_config_file_exists() -> None:
    """Write the default config file if the user's config file is not found."""
    if not os.path.exists(CONFIG_PATH):
        logger.info("Config file not found at %s, creating default.", CONFIG_PATH)
        save_config(DEFAULT_CONFIG)


def load_config() -> Dict[str, Any]:
    """Load the client configuration file."""
    ensure_config_file_exists()
    try:
        with open(CONFIG_PATH, "r") as f:
            config = json.load(f)
            logger.info("Loaded config from %s", CONFIG_PATH)
            return config
    except (IOError, json.JSONDecodeError) as e:
        logger.error("Failed to load config from %s: %s", CONFIG_PATH, e)
        return dict(DEFAULT_CONFIG)


def save_config(config: Dict[str, Any]) -> None:
    """Save the client configuration file."""
    try:
        os.makedirs(os.path.dirname(CONFIG_PATH), exist_ok=True)
        with open(CONFIG_PATH, "w") as f:
            json.dump(config, f, indent=2)
        logger.info("Saved config to %s", CONFIG_PATH)
    except IOError as e:
        logger.error("Failed to save config to %s: %s", CONFIG_PATH, e)
