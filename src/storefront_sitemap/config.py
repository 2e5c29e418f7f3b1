"""Configuration and constants for the sitemap generator."""

import os
import tempfile
from dataclasses import dataclass
from typing import Optional

# sitemaps.org protocol
SITEMAP_NAMESPACE = "http://www.sitemaps.org/schemas/sitemap/0.9"
DEFAULT_MAX_URLS_PER_SITEMAP = 50000  # sitemaps.org limit
DEFAULT_MAX_FILE_SIZE_BYTES = 50 * 1024 * 1024  # 50 MiB uncompressed
DEFAULT_MAX_SITEMAPS_PER_INDEX = 50000  # sitemaps.org limit

# File names
DEFAULT_SITEMAP_FILE_NAME = "sitemap"
DEFAULT_INDEX_FILE_NAME = "sitemap_index.xml"
SITEMAP_FILE_EXTENSION = ".xml"
GZIP_FILE_EXTENSION = ".gz"

LASTMOD_FORMAT = "%Y-%m-%dT%H:%M:%S+00:00"

NO_CONFIGURATION_ERROR_CODE = "No SiteMap Configuration Found"

DEFAULT_LOG_LEVEL = "INFO"


@dataclass
class ServiceSettings:
    """Host-level settings used to wire up a SiteMapService."""
    temp_directory: str
    output_dir: Optional[str] = None
    log_level: str = DEFAULT_LOG_LEVEL


def get_settings_from_env() -> ServiceSettings:
    """Create service settings from environment variables with defaults."""
    return ServiceSettings(
        temp_directory=os.getenv("SITEMAP_TEMP_DIR") or tempfile.gettempdir(),
        output_dir=os.getenv("SITEMAP_OUTPUT_DIR") or None,
        log_level=os.getenv("SITEMAP_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
    )
