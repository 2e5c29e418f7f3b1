"""Durable storage for generated sitemap files."""

import abc
import logging
import os
import re
import shutil
from typing import List

from .config import GZIP_FILE_EXTENSION, SITEMAP_FILE_EXTENSION
from .utils import create_directory_if_not_exists

logger = logging.getLogger(__name__)

_STAGING_PREFIX = ".staging-"
_ENTRY_FILE_PATTERN = re.compile(
    r"^(?P<base>.+)_\d{3,}" + re.escape(SITEMAP_FILE_EXTENSION)
    + r"(" + re.escape(GZIP_FILE_EXTENSION) + r")?$"
)


class SiteMapFileStore(abc.ABC):
    """Destination the builder commits finished sitemap files to."""

    @abc.abstractmethod
    def commit(self, working_directory: str, file_names: List[str]) -> List[str]:
        """
        Make the named files from working_directory durably available.

        Returns:
            Final locations of the files, in the order given.
        """


class LocalDirectoryFileStore(SiteMapFileStore):
    """
    Publishes sitemap files into a local directory, typically a web root.

    Each file is copied to a hidden staging name first and then renamed into
    place, so readers never see a half-written sitemap. Sitemap files left over
    from a previous run that are not part of the new set are removed.
    """

    def __init__(self, output_dir: str):
        self.output_dir = output_dir
        create_directory_if_not_exists(output_dir)

    def commit(self, working_directory: str, file_names: List[str]) -> List[str]:
        committed = []

        for file_name in file_names:
            source = os.path.join(working_directory, file_name)
            target = os.path.join(self.output_dir, file_name)
            staging = os.path.join(self.output_dir, f"{_STAGING_PREFIX}{file_name}")
            try:
                shutil.copyfile(source, staging)
                os.replace(staging, target)
            except OSError as e:
                logger.error(f"Error publishing {file_name} to {self.output_dir}: {e}")
                self._remove_staging_file(staging)
                raise
            committed.append(target)
            logger.debug(f"Published sitemap file: {target}")

        self.cleanup_old_sitemaps(keep=file_names)
        logger.info(f"Published {len(committed)} sitemap files to {self.output_dir}")
        return committed

    def _remove_staging_file(self, staging: str) -> None:
        if not os.path.exists(staging):
            return
        try:
            os.remove(staging)
        except OSError as e:
            logger.warning(f"Could not remove staging file {staging}: {e}")

    def cleanup_old_sitemaps(self, keep: List[str]) -> None:
        """
        Remove sitemap files from output directory that are not in keep.

        A file is stale when it is a numbered entry file sharing a base name
        with a kept entry file, or the compressed/uncompressed twin of a kept
        file.
        """
        keep_names = set(keep)
        base_names = set()
        stale_twins = set()

        for name in keep:
            match = _ENTRY_FILE_PATTERN.match(name)
            if match:
                base_names.add(match.group("base"))
            if name.endswith(GZIP_FILE_EXTENSION):
                stale_twins.add(name[:-len(GZIP_FILE_EXTENSION)])
            else:
                stale_twins.add(name + GZIP_FILE_EXTENSION)

        for filename in os.listdir(self.output_dir):
            if filename in keep_names:
                continue
            match = _ENTRY_FILE_PATTERN.match(filename)
            if filename in stale_twins or (match and match.group("base") in base_names):
                os.remove(os.path.join(self.output_dir, filename))
                logger.debug(f"Removed old sitemap: {filename}")
