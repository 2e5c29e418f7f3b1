"""Utility functions for the sitemap generator."""

import logging
import os
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import urljoin, urlparse

from .config import LASTMOD_FORMAT

logger = logging.getLogger(__name__)


def is_valid_url(url: str) -> bool:
    """Check if URL is valid and uses HTTP/HTTPS scheme."""
    try:
        parsed = urlparse(url)
        return parsed.scheme in ("http", "https") and bool(parsed.netloc)
    except ValueError:
        return False


def resolve_url(site_url: str, url: str) -> str:
    """Resolve a possibly relative URL against the site base URL."""
    # Scheme-relative URLs ("//host/path") keep their host
    if not urlparse(url).netloc:
        url = url.lstrip("/")
    return urljoin(site_url.rstrip("/") + "/", url)


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Set up logging configuration."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


def format_number(number: int) -> str:
    """Format number with thousands separators."""
    return f"{number:,}"


def format_lastmod(value: datetime) -> str:
    """Format a datetime as a W3C datetime in UTC. Naive values are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime(LASTMOD_FORMAT)


def get_current_timestamp() -> str:
    """Get current timestamp in ISO format for sitemaps."""
    return format_lastmod(datetime.now(timezone.utc))


def create_directory_if_not_exists(directory: str) -> None:
    """Create directory if it doesn't exist."""
    os.makedirs(directory, exist_ok=True)
