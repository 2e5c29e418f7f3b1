"""Sources of sitemap configurations."""

import abc
import logging
from typing import Any, Dict, List, Optional, Sequence

from pydantic import ValidationError

from .exceptions import SiteMapConfigurationError
from .schemas import SiteMapConfigurationSchema, SiteMapDocumentSchema
from .types import ModuleConfigurationType, SiteMapConfiguration

logger = logging.getLogger(__name__)


class ConfigurationStore(abc.ABC):
    """Looks up module configurations by type."""

    @abc.abstractmethod
    def find_active_configurations_by_type(
        self, config_type: ModuleConfigurationType
    ) -> Optional[Sequence[SiteMapConfiguration]]:
        """Return the active configurations of config_type in a stable order."""


class InMemoryConfigurationStore(ConfigurationStore):
    """Serves configurations held in memory, in the order given."""

    def __init__(self, configurations: Sequence[SiteMapConfiguration] = ()):
        self.configurations = list(configurations)

    def find_active_configurations_by_type(
        self, config_type: ModuleConfigurationType
    ) -> List[SiteMapConfiguration]:
        return [c for c in self.configurations if c.configuration_type == config_type]



class JSONFileConfigurationStore(ConfigurationStore):
    """
    Reads sitemap configurations from a JSON document of the form::

        {"site_map": [{"name": "...", "site_url": "...", "is_default": true,
                       "generator_configurations": [{"generator_type": "custom", ...}]}]}

    The file is read on every lookup so edits are picked up by the next run.
    """

    def __init__(self, path: str):
        self.path = path

    def find_active_configurations_by_type(
        self, config_type: ModuleConfigurationType
    ) -> List[SiteMapConfiguration]:
        with open(self.path, 'r', encoding='utf-8') as f:
            content = f.read()

        try:
            document = SiteMapDocumentSchema.model_validate_json(content)
        except ValidationError as e:
            raise SiteMapConfigurationError(f"Invalid configuration file {self.path}: {e}") from e

        configurations = [
            schema.to_configuration() for schema in getattr(document, config_type.value)
        ]
        logger.debug(f"Loaded {len(configurations)} {config_type.value} configurations from {self.path}")
        return configurations


def configuration_from_dict(data: Dict[str, Any]) -> SiteMapConfiguration:
    """Build a SiteMapConfiguration from its JSON representation."""
    try:
        schema = SiteMapConfigurationSchema.model_validate(data)
    except ValidationError as e:
        raise SiteMapConfigurationError(f"Invalid sitemap configuration: {e}") from e
    return schema.to_configuration()
