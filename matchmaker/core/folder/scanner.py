"""
Directory scanner for folder synchronization.

Walks a directory tree depth first and builds a ScanIndex:
- Post-order insertion (a directory's contents come before the directory)
- Optional exclusion of exact full paths
- Symbolic links are never followed nor indexed
- Unreadable directories are treated as empty
"""

from __future__ import annotations

import logging
import os
import stat
import time
from collections.abc import Mapping
from pathlib import Path
from typing import Iterator, Optional

from matchmaker.core.errors import ScanError
from matchmaker.core.models import Entry


class ScanIndex(Mapping):
    """
    Ordered, read-only mapping of relative path to Entry.

    Iterating the index visits every directory's contents before the
    directory itself. Iterating ``reversed(index)`` therefore visits a
    directory before anything inside it. The scan root is never a key.
    """

    def __init__(self, root_path: str, honor_exclusions: bool = False):
        self.root_path = root_path
        self.honor_exclusions = honor_exclusions
        self._entries: dict[str, Entry] = {}
        self.scan_time = 0.0

    def _add(self, entry: Entry) -> None:
        self._entries[entry.relative_path] = entry

    def __getitem__(self, relative_path: str) -> Entry:
        return self._entries[relative_path]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __reversed__(self) -> Iterator[str]:
        return reversed(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"ScanIndex(root_path={self.root_path!r}, entries={len(self)})"

    @property
    def total_size(self) -> int:
        return sum(entry.size for entry in self.files())

    def files(self) -> Iterator[Entry]:
        for entry in self._entries.values():
            if entry.is_file:
                yield entry

    def directories(self) -> Iterator[Entry]:
        for entry in self._entries.values():
            if entry.is_directory:
                yield entry

    def dump(self) -> Iterator[str]:
        """Debugging listing, one line per entry in stored order."""
        for entry in self._entries.values():
            yield entry.describe()


class FolderScanner:
    """
    Scans a directory tree into a ScanIndex.

    The exclusion set holds full paths built the same way the scanner
    builds them: the root exactly as given, then ``os.sep`` and each name.
    No canonicalization happens during the walk.
    """

    def __init__(self, exclusions: Optional[frozenset[str]] = None):
        self.exclusions = exclusions or frozenset()

    def scan(self, root_path: Path | str, honor_exclusions: bool = False) -> ScanIndex:
        """
        Scan a directory tree.

        Args:
            root_path: Root directory to scan, without a trailing separator
            honor_exclusions: Skip paths listed in the exclusion set

        Returns:
            ScanIndex of everything found below the root

        Raises:
            ScanError: root has bad syntax, does not exist or is not a directory
        """
        start_time = time.time()

        root_path = os.fspath(root_path)
        self._check_root(root_path)

        index = ScanIndex(root_path, honor_exclusions)
        self._process_directory(root_path, index, len(root_path) + 1, honor_exclusions)

        index.scan_time = time.time() - start_time
        logging.info(
            f"FolderScanner - Scanned {root_path}: {len(index)} entries "
            f"in {index.scan_time:.2f}s"
        )
        return index

    def _check_root(self, root_path: str) -> None:
        if root_path.endswith(os.sep) or (os.altsep and root_path.endswith(os.altsep)):
            logging.error(f"FolderScanner - Root path has bad syntax: {root_path}")
            raise ScanError(f"Top level name ({root_path}) has bad syntax")

        if not os.path.isdir(root_path):
            logging.error(f"FolderScanner - Root path is not a directory: {root_path}")
            raise ScanError(f"Top level name ({root_path}) does not name a folder")

    def _process_directory(
        self,
        full_path: str,
        index: ScanIndex,
        prefix_length: int,
        honor_exclusions: bool
    ) -> None:
        """Add the contents of one directory, recursing into subdirectories first."""
        for dir_entry in self._list_directory(full_path):
            child_path = full_path + os.sep + dir_entry.name

            if honor_exclusions and child_path in self.exclusions:
                logging.debug(f"FolderScanner - Excluded {child_path}")
                continue

            try:
                if dir_entry.is_symlink():
                    logging.debug(f"FolderScanner - Skipping symbolic link {child_path}")
                    continue
                is_directory = dir_entry.is_dir(follow_symlinks=False)
                stat_result = dir_entry.stat(follow_symlinks=False)
            except OSError as e:
                # Vanished between listing and stat.
                logging.debug(f"FolderScanner - Could not stat {child_path}: {e}")
                continue

            if is_directory:
                self._process_directory(child_path, index, prefix_length, honor_exclusions)

            index._add(Entry(
                relative_path=child_path[prefix_length:],
                path=child_path,
                is_directory=is_directory,
                size=stat_result.st_size,
                modified_time=stat_result.st_mtime_ns // 1_000_000,
                is_hidden=self._is_hidden(dir_entry.name, stat_result),
            ))

    @staticmethod
    def _list_directory(full_path: str) -> list[os.DirEntry]:
        """List a directory sorted by name. Unreadable directories are empty."""
        try:
            with os.scandir(full_path) as it:
                return sorted(it, key=lambda d: d.name)
        except OSError as e:
            logging.debug(f"FolderScanner - Cannot list {full_path}, treating as empty: {e}")
            return []

    @staticmethod
    def _is_hidden(name: str, stat_result: os.stat_result) -> bool:
        # st_file_attributes only exists on Windows
        attributes = getattr(stat_result, 'st_file_attributes', 0)
        return name.startswith('.') or bool(attributes & getattr(stat, 'FILE_ATTRIBUTE_HIDDEN', 0))


def scan(
    root_path: Path | str,
    honor_exclusions: bool = False,
    exclusions: Optional[frozenset[str]] = None
) -> ScanIndex:
    """Convenience wrapper around FolderScanner.scan."""
    return FolderScanner(exclusions).scan(root_path, honor_exclusions)
