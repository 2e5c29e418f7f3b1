"""Tests for the custom URL generator."""

import tempfile
from datetime import datetime, timezone
import pytest
from storefront_sitemap.builder import SiteMapBuilder
from storefront_sitemap.exceptions import SiteMapGeneratorError
from storefront_sitemap.generators import CustomURLSiteMapGenerator, SiteMapGenerator
from storefront_sitemap.types import (
    ChangeFrequency,
    CustomURLEntry,
    CustomURLSiteMapGeneratorConfiguration,
    SiteMapConfiguration,
    SiteMapGeneratorConfiguration,
    SiteMapGeneratorType,
)


class CollectingBuilder(SiteMapBuilder):
    """Builder that keeps every added entry for inspection."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.added = []

    def add_url_entry(self, entry):
        self.added.append(entry)
        super().add_url_entry(entry)


@pytest.fixture
def builder():
    with tempfile.TemporaryDirectory() as tmpdir:
        configuration = SiteMapConfiguration(name="store", site_url="https://shop.example.com/")
        yield CollectingBuilder(configuration, tmpdir)


@pytest.fixture
def generator():
    return CustomURLSiteMapGenerator()


def test_generator_contract_is_abstract():
    """Test that the base generator cannot be instantiated."""
    with pytest.raises(TypeError):
        SiteMapGenerator()


def test_can_handle_only_enabled_custom_configurations(generator):
    """Test the capability predicate of the custom generator."""
    assert generator.can_handle(CustomURLSiteMapGeneratorConfiguration())
    assert not generator.can_handle(CustomURLSiteMapGeneratorConfiguration(disabled=True))
    assert not generator.can_handle(SiteMapGeneratorConfiguration(SiteMapGeneratorType.PRODUCT))
    # A plain configuration of type CUSTOM carries no URLs to emit
    assert not generator.can_handle(SiteMapGeneratorConfiguration(SiteMapGeneratorType.CUSTOM))


def test_relative_and_absolute_urls(generator, builder):
    """Test URL resolution against the site URL."""
    configuration = CustomURLSiteMapGeneratorConfiguration(custom_url_entries=[
        CustomURLEntry(url="/about-us"),
        CustomURLEntry(url="help/shipping"),
        CustomURLEntry(url="https://blog.example.com/post"),
    ])

    generator.add_site_map_entries(configuration, builder)

    assert [entry.loc for entry in builder.added] == [
        "https://shop.example.com/about-us",
        "https://shop.example.com/help/shipping",
        "https://blog.example.com/post",
    ]
    assert builder.url_entry_count == 3


def test_entry_values_override_configuration_defaults(generator, builder):
    """Test that per-URL settings take precedence over configuration defaults."""
    modified = datetime(2024, 1, 15, tzinfo=timezone.utc)
    configuration = CustomURLSiteMapGeneratorConfiguration(
        change_frequency=ChangeFrequency.MONTHLY,
        priority=0.3,
        custom_url_entries=(
            CustomURLEntry(url="/contact"),
            CustomURLEntry(
                url="/sale",
                last_modified=modified,
                change_frequency=ChangeFrequency.HOURLY,
                priority=0.0,
            ),
        ),
    )

    generator.add_site_map_entries(configuration, builder)
    contact, sale = builder.added

    assert contact.change_frequency == ChangeFrequency.MONTHLY
    assert contact.priority == 0.3
    assert contact.last_modified is not None

    assert sale.change_frequency == ChangeFrequency.HOURLY
    assert sale.priority == 0.0
    assert sale.last_modified == modified


def test_invalid_url_raises(generator):
    """Test that an unresolvable URL fails the generator."""
    with tempfile.TemporaryDirectory() as tmpdir:
        configuration = SiteMapConfiguration(name="store", site_url="not-a-site")
        invalid_builder = SiteMapBuilder(configuration, tmpdir)

        with pytest.raises(SiteMapGeneratorError):
            generator.add_site_map_entries(
                CustomURLSiteMapGeneratorConfiguration(
                    custom_url_entries=(CustomURLEntry(url="page"),)
                ),
                invalid_builder,
            )
