"""
Storefront Sitemap Generator

Builds sitemaps.org compliant sitemap files for a web storefront from
pluggable URL-entry generators.

Key Features:
- Picks the active sitemap configuration (default-flagged, else first)
- Dispatches each generator configuration to the first capable generator
- Splits URL entries across files by entry count and byte size
- Writes a sitemap index naming every entry file, optionally gzipped
- Publishes the finished set into durable storage one atomic rename per file
"""

__version__ = "1.0.0"

from .builder import SiteMapBuilder, validate_sitemap, get_sitemap_stats
from .config import ServiceSettings, get_settings_from_env
from .configuration_store import (
    ConfigurationStore,
    InMemoryConfigurationStore,
    JSONFileConfigurationStore,
)
from .exceptions import SiteMapConfigurationError, SiteMapException, SiteMapGeneratorError
from .file_store import LocalDirectoryFileStore, SiteMapFileStore
from .generators import CustomURLSiteMapGenerator, SiteMapGenerator
from .service import SiteMapService
from .types import (
    ChangeFrequency,
    CustomURLEntry,
    CustomURLSiteMapGeneratorConfiguration,
    ModuleConfigurationType,
    SiteMapConfiguration,
    SiteMapGenerationResponse,
    SiteMapGeneratorConfiguration,
    SiteMapGeneratorType,
    SiteMapURLEntry,
)
from .utils import setup_logging

__all__ = [
    "ChangeFrequency",
    "ConfigurationStore",
    "CustomURLEntry",
    "CustomURLSiteMapGenerator",
    "CustomURLSiteMapGeneratorConfiguration",
    "InMemoryConfigurationStore",
    "JSONFileConfigurationStore",
    "LocalDirectoryFileStore",
    "ModuleConfigurationType",
    "ServiceSettings",
    "SiteMapBuilder",
    "SiteMapConfiguration",
    "SiteMapConfigurationError",
    "SiteMapException",
    "SiteMapFileStore",
    "SiteMapGenerationResponse",
    "SiteMapGenerator",
    "SiteMapGeneratorConfiguration",
    "SiteMapGeneratorError",
    "SiteMapGeneratorType",
    "SiteMapService",
    "SiteMapURLEntry",
    "get_settings_from_env",
    "get_sitemap_stats",
    "setup_logging",
    "validate_sitemap",
]
