"""Pydantic schemas for sitemap configuration documents."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .config import (
    DEFAULT_INDEX_FILE_NAME,
    DEFAULT_MAX_FILE_SIZE_BYTES,
    DEFAULT_MAX_SITEMAPS_PER_INDEX,
    DEFAULT_MAX_URLS_PER_SITEMAP,
    DEFAULT_SITEMAP_FILE_NAME,
)
from .types import (
    ChangeFrequency,
    CustomURLEntry,
    CustomURLSiteMapGeneratorConfiguration,
    SiteMapConfiguration,
    SiteMapGeneratorConfiguration,
    SiteMapGeneratorType,
)


class CustomURLEntrySchema(BaseModel):
    """One hand-maintained URL of a custom generator configuration."""

    model_config = ConfigDict(extra="forbid")

    url: str = Field(min_length=1)
    last_modified: Optional[datetime] = None
    change_frequency: Optional[ChangeFrequency] = None
    priority: Optional[float] = Field(default=None, ge=0.0, le=1.0)

    def to_entry(self) -> CustomURLEntry:
        return CustomURLEntry(
            url=self.url,
            last_modified=self.last_modified,
            change_frequency=self.change_frequency,
            priority=self.priority,
        )


class GeneratorConfigurationSchema(BaseModel):
    """Settings for one generator. ``custom_url_entries`` only applies to custom ones."""

    model_config = ConfigDict(extra="forbid")

    generator_type: SiteMapGeneratorType
    change_frequency: Optional[ChangeFrequency] = None
    priority: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    disabled: bool = False
    custom_url_entries: List[CustomURLEntrySchema] = Field(default_factory=list)

    def to_configuration(self) -> SiteMapGeneratorConfiguration:
        if self.generator_type == SiteMapGeneratorType.CUSTOM:
            return CustomURLSiteMapGeneratorConfiguration(
                change_frequency=self.change_frequency,
                priority=self.priority,
                disabled=self.disabled,
                custom_url_entries=tuple(entry.to_entry() for entry in self.custom_url_entries),
            )
        return SiteMapGeneratorConfiguration(
            generator_type=self.generator_type,
            change_frequency=self.change_frequency,
            priority=self.priority,
            disabled=self.disabled,
        )


class SiteMapConfigurationSchema(BaseModel):
    """A complete sitemap setup as stored in a configuration document."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1)
    site_url: str = Field(min_length=1)
    is_default: bool = False
    max_url_entries_per_file: int = Field(
        default=DEFAULT_MAX_URLS_PER_SITEMAP,
        ge=1,
        le=DEFAULT_MAX_URLS_PER_SITEMAP,
    )
    max_file_size_bytes: int = Field(
        default=DEFAULT_MAX_FILE_SIZE_BYTES,
        ge=1,
        le=DEFAULT_MAX_FILE_SIZE_BYTES,
    )
    max_site_maps_per_index: int = Field(
        default=DEFAULT_MAX_SITEMAPS_PER_INDEX,
        ge=1,
        le=DEFAULT_MAX_SITEMAPS_PER_INDEX,
    )
    site_map_file_name: str = Field(default=DEFAULT_SITEMAP_FILE_NAME, min_length=1)
    index_file_name: str = Field(default=DEFAULT_INDEX_FILE_NAME, min_length=1)
    compress: bool = False
    generator_configurations: List[GeneratorConfigurationSchema] = Field(default_factory=list)

    def to_configuration(self) -> SiteMapConfiguration:
        return SiteMapConfiguration(
            name=self.name,
            site_url=self.site_url,
            is_default=self.is_default,
            generator_configurations=tuple(
                generator.to_configuration() for generator in self.generator_configurations
            ),
            max_url_entries_per_file=self.max_url_entries_per_file,
            max_file_size_bytes=self.max_file_size_bytes,
            max_site_maps_per_index=self.max_site_maps_per_index,
            site_map_file_name=self.site_map_file_name,
            index_file_name=self.index_file_name,
            compress=self.compress,
        )


class SiteMapDocumentSchema(BaseModel):
    """Top level of a JSON configuration file."""

    site_map: List[SiteMapConfigurationSchema] = Field(default_factory=list)


__all__ = [
    "CustomURLEntrySchema",
    "GeneratorConfigurationSchema",
    "SiteMapConfigurationSchema",
    "SiteMapDocumentSchema",
]
