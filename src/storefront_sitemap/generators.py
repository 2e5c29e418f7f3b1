"""Generators that turn a generator configuration into sitemap URL entries."""

import abc
import logging
from datetime import datetime, timezone

from .builder import SiteMapBuilder
from .exceptions import SiteMapGeneratorError
from .types import (
    CustomURLSiteMapGeneratorConfiguration,
    SiteMapGeneratorConfiguration,
    SiteMapURLEntry,
)
from .utils import is_valid_url, resolve_url

logger = logging.getLogger(__name__)


class SiteMapGenerator(abc.ABC):
    """
    Produces URL entries for one kind of content.

    The service asks each registered generator, in registration order, whether
    it can handle a generator configuration and uses the first that says yes.
    """

    @abc.abstractmethod
    def can_handle(self, generator_configuration: SiteMapGeneratorConfiguration) -> bool:
        """Return True if this generator produces entries for the configuration."""

    @abc.abstractmethod
    def add_site_map_entries(
        self,
        generator_configuration: SiteMapGeneratorConfiguration,
        builder: SiteMapBuilder
    ) -> None:
        """Add the configuration's URL entries to the builder."""


class CustomURLSiteMapGenerator(SiteMapGenerator):
    """Emits the hand-maintained URLs listed in a custom generator configuration."""

    def can_handle(self, generator_configuration: SiteMapGeneratorConfiguration) -> bool:
        return (
            isinstance(generator_configuration, CustomURLSiteMapGeneratorConfiguration)
            and not generator_configuration.disabled
        )

    def add_site_map_entries(
        self,
        generator_configuration: CustomURLSiteMapGeneratorConfiguration,
        builder: SiteMapBuilder
    ) -> None:
        now = datetime.now(timezone.utc)

        for custom_entry in generator_configuration.custom_url_entries:
            loc = resolve_url(builder.site_url, custom_entry.url)
            if not is_valid_url(loc):
                raise SiteMapGeneratorError(f"Invalid custom sitemap URL: {custom_entry.url}")

            builder.add_url_entry(SiteMapURLEntry(
                loc=loc,
                last_modified=custom_entry.last_modified or now,
                change_frequency=(
                    custom_entry.change_frequency or generator_configuration.change_frequency
                ),
                priority=(
                    custom_entry.priority
                    if custom_entry.priority is not None
                    else generator_configuration.priority
                ),
            ))

        logger.debug(
            f"Added {len(generator_configuration.custom_url_entries)} custom URL entries"
        )
