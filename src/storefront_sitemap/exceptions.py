"""Exceptions raised by the sitemap generator."""


class SiteMapException(Exception):
    """Base class for sitemap generation failures."""


class SiteMapConfigurationError(SiteMapException):
    """A sitemap configuration is malformed or out of range."""


class SiteMapGeneratorError(SiteMapException):
    """A generator could not produce its URL entries."""
