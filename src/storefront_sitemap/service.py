"""Sitemap service that coordinates configuration lookup, generators and the builder."""

import logging
import shutil
import tempfile
from typing import Optional, Sequence, Tuple

from .builder import SiteMapBuilder
from .config import NO_CONFIGURATION_ERROR_CODE
from .configuration_store import ConfigurationStore
from .file_store import SiteMapFileStore
from .generators import SiteMapGenerator
from .types import (
    ModuleConfigurationType,
    SiteMapConfiguration,
    SiteMapGenerationResponse,
    SiteMapGeneratorConfiguration,
)
from .utils import create_directory_if_not_exists

logger = logging.getLogger(__name__)


class SiteMapService:
    """
    Generates a sitemap index and its entry files.

    URL entries come from the registered generators; the service only decides
    which configuration is active and which generator handles each of its
    generator configurations. Every run builds in a fresh directory under
    ``temp_directory``. If the run fails that directory is removed and the
    exception propagates. Publishing into a shared output directory is not
    locked, so callers must not run two generations against the same file
    store at once.
    """

    def __init__(
        self,
        configuration_store: ConfigurationStore,
        generators: Sequence[SiteMapGenerator],
        file_store: Optional[SiteMapFileStore] = None,
        temp_directory: Optional[str] = None
    ):
        self.configuration_store = configuration_store
        self._generators = tuple(generators)
        self.file_store = file_store
        self.temp_directory = temp_directory or tempfile.gettempdir()

    @property
    def site_map_generators(self) -> Tuple[SiteMapGenerator, ...]:
        return self._generators

    def generate_site_map(self) -> SiteMapGenerationResponse:
        """
        Run one sitemap generation.

        Returns:
            A failed response if no sitemap configuration exists, otherwise a
            successful one listing the persisted files (index first).

        Raises:
            OSError: if writing or publishing a file fails.
            SiteMapException: if a generator or the builder rejects the data.
        """
        configuration = self.find_active_site_map_configuration()
        if configuration is None:
            logger.warning("No SiteMap generated since no active configuration was found.")
            return SiteMapGenerationResponse.failure(NO_CONFIGURATION_ERROR_CODE)

        create_directory_if_not_exists(self.temp_directory)
        working_directory = tempfile.mkdtemp(prefix="sitemap-", dir=self.temp_directory)
        logger.info(f"Generating sitemap '{configuration.name}' in {working_directory}")

        try:
            builder = SiteMapBuilder(configuration, working_directory, self.file_store)

            for generator_configuration in configuration.generator_configurations:
                generator = self.select_site_map_generator(generator_configuration)
                if generator is None:
                    logger.warning(
                        f"No site map generator found to process "
                        f"{generator_configuration.generator_type.value} configuration "
                        f"of '{configuration.name}'"
                    )
                    continue
                generator.add_site_map_entries(generator_configuration, builder)

            site_map_files = builder.persist_site_map()
        except Exception as e:
            logger.debug(f"Sitemap generation for '{configuration.name}' failed: {e}")
            self._discard_working_directory(working_directory)
            raise

        # Without a file store the working directory is the final location
        if self.file_store is not None:
            self._discard_working_directory(working_directory)

        return SiteMapGenerationResponse.success(site_map_files)

    def find_active_site_map_configuration(self) -> Optional[SiteMapConfiguration]:
        """Return the first default configuration, else the first one, else None."""
        configurations = self.configuration_store.find_active_configurations_by_type(
            ModuleConfigurationType.SITE_MAP
        )
        if not configurations:
            return None

        for configuration in configurations:
            if configuration.is_default:
                return configuration
        return configurations[0]

    def select_site_map_generator(
        self, generator_configuration: SiteMapGeneratorConfiguration
    ) -> Optional[SiteMapGenerator]:
        """Return the first registered generator that can handle the configuration."""
        for generator in self._generators:
            if generator.can_handle(generator_configuration):
                return generator
        return None

    def _discard_working_directory(self, working_directory: str) -> None:
        shutil.rmtree(working_directory, ignore_errors=True)
        logger.debug(f"Removed working directory {working_directory}")
