"""Sitemap builder that splits URL entries into sitemaps.org compliant files."""

import gzip
import logging
import os
from typing import TYPE_CHECKING, Dict, List, Optional

from lxml import etree

from .config import GZIP_FILE_EXTENSION, SITEMAP_FILE_EXTENSION, SITEMAP_NAMESPACE
from .exceptions import SiteMapException
from .types import SiteMapConfiguration, SiteMapURLEntry
from .utils import (
    create_directory_if_not_exists,
    format_lastmod,
    format_number,
    get_current_timestamp,
    is_valid_url,
    resolve_url,
)

if TYPE_CHECKING:
    from .file_store import SiteMapFileStore

logger = logging.getLogger(__name__)

# Declaration, <urlset xmlns="..."> and </urlset>, rounded up
_URLSET_OVERHEAD_BYTES = len(
    etree.tostring(
        etree.Element(f"{{{SITEMAP_NAMESPACE}}}urlset", nsmap={None: SITEMAP_NAMESPACE}),
        encoding="UTF-8",
        xml_declaration=True,
    )
) + len("</urlset>") + 1


def _qualify(name: str, namespace: Optional[str]) -> str:
    return f"{{{namespace}}}{name}" if namespace else name


def _append_url_element(
    parent: etree._Element,
    entry: SiteMapURLEntry,
    namespace: Optional[str] = None
) -> etree._Element:
    """Append a <url> element for entry to parent."""
    url_element = etree.SubElement(parent, _qualify("url", namespace))

    # Location (required)
    etree.SubElement(url_element, _qualify("loc", namespace)).text = entry.loc

    if entry.last_modified is not None:
        lastmod_element = etree.SubElement(url_element, _qualify("lastmod", namespace))
        lastmod_element.text = format_lastmod(entry.last_modified)

    if entry.change_frequency is not None:
        changefreq_element = etree.SubElement(url_element, _qualify("changefreq", namespace))
        changefreq_element.text = entry.change_frequency.value

    if entry.priority is not None:
        priority_element = etree.SubElement(url_element, _qualify("priority", namespace))
        priority_element.text = f"{entry.priority:.1f}"

    return url_element


def serialized_entry_size(entry: SiteMapURLEntry) -> int:
    """Number of bytes the entry's <url> element takes up inside a urlset."""
    element = _append_url_element(etree.Element("urlset"), entry)
    return len(etree.tostring(element, encoding="UTF-8", xml_declaration=False))


class SiteMapBuilder:
    """
    Accumulates URL entries for one generation run and writes them out.

    Entries are buffered for the current file only. Once the next entry would
    push the file past the configured entry count or byte size, the buffered
    entries are written to the working directory and a new file is started.
    ``persist_site_map`` writes the remainder plus the index file and hands
    everything to the file store.
    """

    def __init__(
        self,
        configuration: SiteMapConfiguration,
        working_directory: str,
        file_store: Optional["SiteMapFileStore"] = None
    ):
        self.configuration = configuration
        self.working_directory = working_directory
        self.file_store = file_store
        self.max_urls_per_sitemap = configuration.max_url_entries_per_file
        self.max_file_size_bytes = configuration.max_file_size_bytes
        self.timestamp = get_current_timestamp()

        self._entries: List[SiteMapURLEntry] = []
        self._current_size = _URLSET_OVERHEAD_BYTES
        self._entry_file_names: List[str] = []
        self._url_entry_count = 0
        self._persisted = False

        create_directory_if_not_exists(working_directory)

    @property
    def site_url(self) -> str:
        return self.configuration.site_url

    @property
    def entry_file_names(self) -> List[str]:
        """Names of the entry files written so far, in order."""
        return list(self._entry_file_names)

    @property
    def url_entry_count(self) -> int:
        return self._url_entry_count

    def add_url_entry(self, entry: SiteMapURLEntry) -> None:
        """Add an entry, rolling over to a new file when the current one is full."""
        if self._persisted:
            raise SiteMapException("Cannot add entries after the sitemap was persisted")

        entry_size = serialized_entry_size(entry)
        if _URLSET_OVERHEAD_BYTES + entry_size > self.max_file_size_bytes:
            raise SiteMapException(
                f"URL entry {entry.loc} does not fit in a sitemap file of "
                f"{self.max_file_size_bytes} bytes"
            )

        if (
            len(self._entries) >= self.max_urls_per_sitemap
            or self._current_size + entry_size > self.max_file_size_bytes
        ):
            self._flush_current_file()

        self._entries.append(entry)
        self._current_size += entry_size
        self._url_entry_count += 1

    def persist_site_map(self) -> List[str]:
        """
        Write any buffered entries and the index file, then commit the set.

        Returns:
            Locations of the persisted files, index file first. These are
            paths inside the working directory when no file store is set.
        """
        if self._persisted:
            raise SiteMapException("Sitemap was already persisted")

        # The index always names at least one entry file
        if self._entries or not self._entry_file_names:
            self._flush_current_file()

        index_file_name = self._write_sitemap_index()
        self._persisted = True

        # Entry files are committed before the index that references them
        file_names = self._entry_file_names + [index_file_name]
        logger.info(
            f"Built sitemap '{self.configuration.name}' with "
            f"{format_number(self._url_entry_count)} URLs in "
            f"{len(self._entry_file_names)} file(s)"
        )

        if self.file_store is None:
            locations = [os.path.join(self.working_directory, name) for name in file_names]
        else:
            locations = self.file_store.commit(self.working_directory, file_names)
        return [locations[-1]] + locations[:-1]

    def _next_entry_file_name(self) -> str:
        number = len(self._entry_file_names) + 1
        file_name = f"{self.configuration.site_map_file_name}_{number:03d}{SITEMAP_FILE_EXTENSION}"
        if self.configuration.compress:
            file_name += GZIP_FILE_EXTENSION
        return file_name

    def _flush_current_file(self) -> None:
        """Write buffered entries to the next entry file and reset the buffer."""
        if len(self._entry_file_names) >= self.configuration.max_site_maps_per_index:
            raise SiteMapException(
                f"Sitemap '{self.configuration.name}' needs more than "
                f"{self.configuration.max_site_maps_per_index} entry files for one index"
            )

        file_name = self._next_entry_file_name()
        filepath = os.path.join(self.working_directory, file_name)

        root = etree.Element(
            _qualify("urlset", SITEMAP_NAMESPACE),
            nsmap={None: SITEMAP_NAMESPACE}
        )
        for entry in self._entries:
            _append_url_element(root, entry, SITEMAP_NAMESPACE)

        self._write_tree(root, filepath)
        logger.debug(f"Written sitemap with {len(self._entries)} URLs to {filepath}")

        self._entry_file_names.append(file_name)
        self._entries = []
        self._current_size = _URLSET_OVERHEAD_BYTES

    def _write_sitemap_index(self) -> str:
        """Write the index file listing every entry file. Returns its name."""
        index_file_name = self.configuration.index_file_name
        if self.configuration.compress:
            index_file_name += GZIP_FILE_EXTENSION
        index_filepath = os.path.join(self.working_directory, index_file_name)

        root = etree.Element(
            _qualify("sitemapindex", SITEMAP_NAMESPACE),
            nsmap={None: SITEMAP_NAMESPACE}
        )

        for file_name in self._entry_file_names:
            sitemap_element = etree.SubElement(root, _qualify("sitemap", SITEMAP_NAMESPACE))

            loc_element = etree.SubElement(sitemap_element, _qualify("loc", SITEMAP_NAMESPACE))
            loc_element.text = resolve_url(self.site_url, file_name)

            lastmod_element = etree.SubElement(
                sitemap_element, _qualify("lastmod", SITEMAP_NAMESPACE)
            )
            lastmod_element.text = self.timestamp

        self._write_tree(root, index_filepath)
        logger.debug(f"Written sitemap index to {index_filepath}")
        return index_file_name

    def _write_tree(self, root: etree._Element, filepath: str) -> None:
        opener = gzip.open if self.configuration.compress else open
        try:
            with opener(filepath, 'wb') as f:
                etree.ElementTree(root).write(f, encoding="UTF-8", xml_declaration=True)
        except OSError as e:
            logger.error(f"Error writing sitemap to {filepath}: {e}")
            raise


def _parse_sitemap(filepath: str) -> etree._ElementTree:
    if filepath.endswith(GZIP_FILE_EXTENSION):
        with gzip.open(filepath, "rb") as f:
            return etree.parse(f)
    return etree.parse(filepath)


def validate_sitemap(filepath: str, max_urls_per_sitemap: int) -> bool:
    """Validate a sitemap entry file against the basic protocol rules."""
    try:
        root = _parse_sitemap(filepath).getroot()
    except (OSError, etree.XMLSyntaxError) as e:
        logger.error(f"Error validating sitemap {filepath}: {e}")
        return False

    if root.tag != f"{{{SITEMAP_NAMESPACE}}}urlset":
        logger.error(f"Invalid root element in {filepath}")
        return False

    urls = root.findall(f"{{{SITEMAP_NAMESPACE}}}url")
    if len(urls) > max_urls_per_sitemap:
        logger.error(f"Too many URLs in sitemap: {len(urls)}")
        return False

    for url_elem in urls:
        loc_elem = url_elem.find(f"{{{SITEMAP_NAMESPACE}}}loc")
        if loc_elem is None or not loc_elem.text:
            logger.error("URL missing location")
            return False

        if not is_valid_url(loc_elem.text):
            logger.error(f"Invalid URL format: {loc_elem.text}")
            return False

    logger.info(f"Sitemap validation passed: {filepath}")
    return True


def get_sitemap_stats(filepath: str) -> Dict:
    """Get statistics about a sitemap entry file."""
    root = _parse_sitemap(filepath).getroot()
    urls = root.findall(f"{{{SITEMAP_NAMESPACE}}}url")

    stats = {
        'total_urls': len(urls),
        'file_size_bytes': os.path.getsize(filepath),
        'has_lastmod': 0,
        'has_changefreq': 0,
        'has_priority': 0,
        'changefreq_distribution': {},
    }

    for url_elem in urls:
        if url_elem.find(f"{{{SITEMAP_NAMESPACE}}}lastmod") is not None:
            stats['has_lastmod'] += 1

        changefreq_elem = url_elem.find(f"{{{SITEMAP_NAMESPACE}}}changefreq")
        if changefreq_elem is not None:
            stats['has_changefreq'] += 1
            freq = changefreq_elem.text
            stats['changefreq_distribution'][freq] = stats['changefreq_distribution'].get(freq, 0) + 1

        if url_elem.find(f"{{{SITEMAP_NAMESPACE}}}priority") is not None:
            stats['has_priority'] += 1

    return stats
