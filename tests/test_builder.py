"""Tests for sitemap builder functionality."""

import gzip
import os
import tempfile
from datetime import datetime, timezone
from lxml import etree
import pytest
from storefront_sitemap import builder as builder_module
from storefront_sitemap.builder import (
    SiteMapBuilder,
    get_sitemap_stats,
    serialized_entry_size,
    validate_sitemap,
)
from storefront_sitemap.exceptions import SiteMapException
from storefront_sitemap.types import ChangeFrequency, SiteMapConfiguration, SiteMapURLEntry

NS = "{http://www.sitemaps.org/schemas/sitemap/0.9}"


def make_configuration(**overrides):
    values = dict(name="storefront", site_url="https://shop.example.com")
    values.update(overrides)
    return SiteMapConfiguration(**values)


def make_entries(count):
    return [SiteMapURLEntry(loc=f"https://shop.example.com/product/{i}") for i in range(count)]


def read_locs(filepath):
    root = etree.parse(filepath).getroot()
    return [loc.text for loc in root.iter(f"{NS}loc")]


@pytest.fixture
def working_dir():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def site_map_builder(working_dir):
    """Create builder with a small per-file limit."""
    return SiteMapBuilder(make_configuration(max_url_entries_per_file=2), working_dir)


def test_entries_split_across_files(site_map_builder):
    """Test that entries roll over into new files at the entry limit."""
    entries = make_entries(5)
    for entry in entries:
        site_map_builder.add_url_entry(entry)

    files = site_map_builder.persist_site_map()

    assert site_map_builder.entry_file_names == [
        "sitemap_001.xml", "sitemap_002.xml", "sitemap_003.xml"
    ]
    assert len(files) == 4
    assert files[0].endswith("sitemap_index.xml")

    written = [read_locs(path) for path in files[1:]]
    assert [len(locs) for locs in written] == [2, 2, 1]
    # Insertion order is preserved across files
    assert [loc for locs in written for loc in locs] == [entry.loc for entry in entries]


def test_index_lists_exactly_the_entry_files(site_map_builder):
    """Test the index names every entry file and nothing else."""
    for entry in make_entries(3):
        site_map_builder.add_url_entry(entry)

    files = site_map_builder.persist_site_map()

    root = etree.parse(files[0]).getroot()
    assert root.tag == f"{NS}sitemapindex"

    sitemaps = root.findall(f"{NS}sitemap")
    assert [s.find(f"{NS}loc").text for s in sitemaps] == [
        "https://shop.example.com/sitemap_001.xml",
        "https://shop.example.com/sitemap_002.xml",
    ]
    for sitemap in sitemaps:
        assert sitemap.find(f"{NS}lastmod").text == site_map_builder.timestamp


def test_sixty_thousand_entries_make_two_files(working_dir):
    """Test the protocol limit split of 60,000 entries."""
    site_map_builder = SiteMapBuilder(make_configuration(), working_dir)
    for entry in make_entries(60000):
        site_map_builder.add_url_entry(entry)

    files = site_map_builder.persist_site_map()

    assert len(site_map_builder.entry_file_names) == 2
    assert get_sitemap_stats(files[1])['total_urls'] == 50000
    assert get_sitemap_stats(files[2])['total_urls'] == 10000
    assert site_map_builder.url_entry_count == 60000


def test_file_size_limit_starts_new_file(working_dir):
    """Test that the byte ceiling splits files before the entry limit does."""
    entries = make_entries(5)
    entry_size = serialized_entry_size(entries[0])
    max_size = builder_module._URLSET_OVERHEAD_BYTES + 2 * entry_size

    site_map_builder = SiteMapBuilder(make_configuration(max_file_size_bytes=max_size), working_dir)
    for entry in entries:
        site_map_builder.add_url_entry(entry)
    files = site_map_builder.persist_site_map()

    assert len(site_map_builder.entry_file_names) == 3
    for path in files[1:]:
        assert os.path.getsize(path) <= max_size


def test_entry_larger_than_file_limit(working_dir):
    """Test that an entry that can never fit is rejected."""
    site_map_builder = SiteMapBuilder(make_configuration(max_file_size_bytes=100), working_dir)

    with pytest.raises(SiteMapException):
        site_map_builder.add_url_entry(SiteMapURLEntry(loc="https://shop.example.com/" + "a" * 200))


def test_empty_sitemap_still_has_one_file(site_map_builder):
    """Test persisting without entries writes an empty urlset and an index."""
    files = site_map_builder.persist_site_map()

    assert site_map_builder.entry_file_names == ["sitemap_001.xml"]
    assert get_sitemap_stats(files[1])['total_urls'] == 0
    assert validate_sitemap(files[1], 2)


def test_sitemap_xml_structure(site_map_builder):
    """Test the structure of generated XML sitemap."""
    modified = datetime(2024, 3, 1, 12, 30, tzinfo=timezone.utc)
    site_map_builder.add_url_entry(SiteMapURLEntry(
        loc="https://shop.example.com/category/shoes",
        last_modified=modified,
        change_frequency=ChangeFrequency.DAILY,
        priority=0.8,
    ))
    files = site_map_builder.persist_site_map()

    root = etree.parse(files[1]).getroot()
    assert root.tag == f"{NS}urlset"

    urls = root.findall(f"{NS}url")
    assert len(urls) == 1

    url_elem = urls[0]
    assert url_elem.find(f"{NS}loc").text == "https://shop.example.com/category/shoes"
    assert url_elem.find(f"{NS}lastmod").text == "2024-03-01T12:30:00+00:00"
    assert url_elem.find(f"{NS}changefreq").text == "daily"
    assert url_elem.find(f"{NS}priority").text == "0.8"


def test_optional_elements_omitted(site_map_builder):
    """Test that unset fields produce no elements."""
    site_map_builder.add_url_entry(SiteMapURLEntry(loc="https://shop.example.com/about"))
    files = site_map_builder.persist_site_map()

    stats = get_sitemap_stats(files[1])
    assert stats['has_lastmod'] == 0
    assert stats['has_changefreq'] == 0
    assert stats['has_priority'] == 0


def test_compressed_output(working_dir):
    """Test gzip packaging of entry and index files."""
    site_map_builder = SiteMapBuilder(make_configuration(compress=True), working_dir)
    for entry in make_entries(3):
        site_map_builder.add_url_entry(entry)

    files = site_map_builder.persist_site_map()

    assert os.path.basename(files[0]) == "sitemap_index.xml.gz"
    assert os.path.basename(files[1]) == "sitemap_001.xml.gz"
    for path in files:
        with open(path, 'rb') as f:
            assert f.read(2) == b"\x1f\x8b"

    assert validate_sitemap(files[1], 50000)
    with gzip.open(files[0], 'rb') as f:
        index = etree.parse(f).getroot()
    assert index.find(f"{NS}sitemap/{NS}loc").text == "https://shop.example.com/sitemap_001.xml.gz"


def test_custom_file_names(working_dir):
    """Test configured base and index file names."""
    configuration = make_configuration(site_map_file_name="products", index_file_name="index.xml")
    site_map_builder = SiteMapBuilder(configuration, working_dir)
    site_map_builder.add_url_entry(make_entries(1)[0])

    files = site_map_builder.persist_site_map()

    assert [os.path.basename(path) for path in files] == ["index.xml", "products_001.xml"]


def test_persist_only_once(site_map_builder):
    """Test that a persisted builder accepts no more work."""
    site_map_builder.persist_site_map()

    with pytest.raises(SiteMapException):
        site_map_builder.persist_site_map()
    with pytest.raises(SiteMapException):
        site_map_builder.add_url_entry(make_entries(1)[0])


def test_persist_commits_through_file_store(working_dir):
    """Test that entry files are committed before the index, which is returned first."""
    class RecordingStore:
        def commit(self, working_directory, file_names):
            self.call = (working_directory, list(file_names))
            return [f"stored/{name}" for name in file_names]

    store = RecordingStore()
    site_map_builder = SiteMapBuilder(make_configuration(), working_dir, store)
    site_map_builder.add_url_entry(make_entries(1)[0])

    files = site_map_builder.persist_site_map()

    assert store.call == (working_dir, ["sitemap_001.xml", "sitemap_index.xml"])
    assert files == ["stored/sitemap_index.xml", "stored/sitemap_001.xml"]


def test_too_many_entry_files_for_one_index(working_dir):
    """Test that exceeding the per-index file limit raises."""
    site_map_builder = SiteMapBuilder(
        make_configuration(max_url_entries_per_file=1, max_site_maps_per_index=2), working_dir
    )
    entries = make_entries(3)
    site_map_builder.add_url_entry(entries[0])
    site_map_builder.add_url_entry(entries[1])

    with pytest.raises(SiteMapException):
        site_map_builder.add_url_entry(entries[2])
        site_map_builder.persist_site_map()

    assert site_map_builder.entry_file_names == ["sitemap_001.xml", "sitemap_002.xml"]


def test_index_file_limit_reached_exactly(working_dir):
    """Test that filling the index exactly is allowed."""
    site_map_builder = SiteMapBuilder(
        make_configuration(max_url_entries_per_file=1, max_site_maps_per_index=2), working_dir
    )
    for entry in make_entries(2):
        site_map_builder.add_url_entry(entry)

    files = site_map_builder.persist_site_map()

    assert [os.path.basename(f) for f in files] == [
        "sitemap_index.xml", "sitemap_001.xml", "sitemap_002.xml"
    ]


def test_write_failure_propagates(working_dir):
    """Test that an unwritable working directory raises OSError."""
    site_map_builder = SiteMapBuilder(make_configuration(), os.path.join(working_dir, "gone"))
    os.rmdir(site_map_builder.working_directory)

    with pytest.raises(OSError):
        site_map_builder.persist_site_map()


def test_sitemap_validation_rejects_bad_documents(working_dir):
    """Test sitemap validation functionality."""
    wrong_root = os.path.join(working_dir, "wrong.xml")
    with open(wrong_root, 'w') as f:
        f.write('<?xml version="1.0" encoding="UTF-8"?><other/>')

    relative_loc = os.path.join(working_dir, "relative.xml")
    with open(relative_loc, 'w') as f:
        f.write(
            '<?xml version="1.0" encoding="UTF-8"?>'
            '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">'
            '<url><loc>/relative</loc></url></urlset>'
        )

    broken = os.path.join(working_dir, "broken.xml")
    with open(broken, 'w') as f:
        f.write("<urlset>")

    assert validate_sitemap(wrong_root, 10) is False
    assert validate_sitemap(relative_loc, 10) is False
    assert validate_sitemap(broken, 10) is False


def test_sitemap_validation_entry_limit(site_map_builder):
    """Test that validation enforces the entry limit passed in."""
    for entry in make_entries(2):
        site_map_builder.add_url_entry(entry)
    files = site_map_builder.persist_site_map()

    assert validate_sitemap(files[1], 2) is True
    assert validate_sitemap(files[1], 1) is False
