"""Type definitions for the sitemap generator."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

from .config import (
    DEFAULT_INDEX_FILE_NAME,
    DEFAULT_MAX_FILE_SIZE_BYTES,
    DEFAULT_MAX_SITEMAPS_PER_INDEX,
    DEFAULT_MAX_URLS_PER_SITEMAP,
    DEFAULT_SITEMAP_FILE_NAME,
)
from .exceptions import SiteMapConfigurationError


class ModuleConfigurationType(Enum):
    """Kinds of module configuration held by a configuration store."""
    SITE_MAP = "site_map"


class SiteMapGeneratorType(Enum):
    """Content types a generator configuration can target."""
    CATEGORY = "category"
    PRODUCT = "product"
    SKU = "sku"
    PAGE = "page"
    CUSTOM = "custom"


class ChangeFrequency(Enum):
    """Sitemap change frequency values."""
    ALWAYS = "always"
    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    NEVER = "never"


def _check_priority(priority: Optional[float]) -> None:
    if priority is not None and not 0.0 <= priority <= 1.0:
        raise SiteMapConfigurationError(
            f"Priority must be between 0.0 and 1.0, got {priority}"
        )


def _check_limit(name: str, value: int, maximum: int) -> None:
    if not 1 <= value <= maximum:
        raise SiteMapConfigurationError(
            f"{name} must be between 1 and {maximum}, got {value}"
        )


@dataclass
class SiteMapURLEntry:
    """Entry in a sitemap XML file."""
    loc: str
    last_modified: Optional[datetime] = None
    change_frequency: Optional[ChangeFrequency] = None
    priority: Optional[float] = None

    def __post_init__(self) -> None:
        _check_priority(self.priority)


@dataclass(frozen=True)
class SiteMapGeneratorConfiguration:
    """Per-content-type settings handed to a generator."""
    generator_type: SiteMapGeneratorType
    change_frequency: Optional[ChangeFrequency] = None
    priority: Optional[float] = None
    disabled: bool = False

    def __post_init__(self) -> None:
        _check_priority(self.priority)


@dataclass(frozen=True)
class CustomURLEntry:
    """A hand-maintained URL, usually relative to the site root."""
    url: str
    last_modified: Optional[datetime] = None
    change_frequency: Optional[ChangeFrequency] = None
    priority: Optional[float] = None

    def __post_init__(self) -> None:
        _check_priority(self.priority)


@dataclass(frozen=True)
class CustomURLSiteMapGeneratorConfiguration(SiteMapGeneratorConfiguration):
    """Generator configuration carrying an explicit list of URLs."""
    generator_type: SiteMapGeneratorType = SiteMapGeneratorType.CUSTOM
    custom_url_entries: Tuple[CustomURLEntry, ...] = ()

    def __post_init__(self) -> None:
        super().__post_init__()
        object.__setattr__(self, "custom_url_entries", tuple(self.custom_url_entries))


@dataclass(frozen=True)
class SiteMapConfiguration:
    """
    A complete sitemap setup.

    Read-only for the duration of a generation run. ``generator_configurations``
    is processed in order; ``site_url`` is the public base URL the sitemap files
    are served from.
    """
    name: str
    site_url: str
    generator_configurations: Tuple[SiteMapGeneratorConfiguration, ...] = ()
    is_default: bool = False
    max_url_entries_per_file: int = DEFAULT_MAX_URLS_PER_SITEMAP
    max_file_size_bytes: int = DEFAULT_MAX_FILE_SIZE_BYTES
    max_site_maps_per_index: int = DEFAULT_MAX_SITEMAPS_PER_INDEX
    site_map_file_name: str = DEFAULT_SITEMAP_FILE_NAME
    index_file_name: str = DEFAULT_INDEX_FILE_NAME
    compress: bool = False
    configuration_type: ModuleConfigurationType = field(
        default=ModuleConfigurationType.SITE_MAP, compare=False
    )

    def __post_init__(self) -> None:
        # Lists are accepted for convenience but stored as a tuple
        object.__setattr__(
            self, "generator_configurations", tuple(self.generator_configurations)
        )
        _check_limit("max_url_entries_per_file", self.max_url_entries_per_file,
                     DEFAULT_MAX_URLS_PER_SITEMAP)
        _check_limit("max_file_size_bytes", self.max_file_size_bytes,
                     DEFAULT_MAX_FILE_SIZE_BYTES)
        _check_limit("max_site_maps_per_index", self.max_site_maps_per_index,
                     DEFAULT_MAX_SITEMAPS_PER_INDEX)
        if not self.site_map_file_name:
            raise SiteMapConfigurationError("site_map_file_name cannot be empty")
        if not self.index_file_name:
            raise SiteMapConfigurationError("index_file_name cannot be empty")


@dataclass(frozen=True)
class SiteMapGenerationResponse:
    """
    Outcome of one generation run.

    Either a success listing the produced files or a failure carrying an
    error code. ``has_error`` is derived from ``error_code``.
    """
    site_map_files: Tuple[str, ...] = ()
    error_code: Optional[str] = None

    @property
    def has_error(self) -> bool:
        return self.error_code is not None

    @classmethod
    def success(cls, site_map_files) -> "SiteMapGenerationResponse":
        return cls(site_map_files=tuple(site_map_files))

    @classmethod
    def failure(cls, error_code: str) -> "SiteMapGenerationResponse":
        if not error_code:
            raise ValueError("A failed response needs an error code")
        return cls(error_code=error_code)
