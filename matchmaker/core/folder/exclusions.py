"""
Exclusion list loading.

The exclusion file is a flat list of full paths, one per line. Empty lines
and lines starting with ``#`` are ignored. Only the line terminator is
removed, so surrounding whitespace stays part of the path. Entries are
compared verbatim against the full paths the scanner builds, after
separator normalization.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

DEFAULT_EXCLUSIONS_FILE = "exclusions.txt"


def normalize_separators(path: str) -> str:
    """Replace both ``/`` and ``\\`` with the host separator."""
    return path.replace('/', os.sep).replace('\\', os.sep)


def parse_exclusions(lines) -> frozenset[str]:
    """Build an exclusion set from an iterable of raw lines."""
    exclusions = set()
    for line in lines:
        line = line.rstrip('\r\n')
        if line and not line.startswith('#'):
            exclusions.add(normalize_separators(line))
    return frozenset(exclusions)


def load_exclusions(path: Path | str = DEFAULT_EXCLUSIONS_FILE) -> frozenset[str]:
    """
    Load the exclusion set from a file.

    A missing file is not an error and yields an empty set. So does an
    unreadable one, with a warning.
    """
    path = Path(path)

    try:
        with open(path, 'r', encoding='utf-8', errors='replace') as f:
            exclusions = parse_exclusions(f)
    except FileNotFoundError:
        logging.debug(f"Exclusions - No exclusion file at {path}")
        return frozenset()
    except OSError as e:
        logging.warning(f"Exclusions - Could not read exclusion file {path}: {e}")
        return frozenset()

    logging.debug(f"Exclusions - Loaded {len(exclusions)} exclusions from {path}")
    return exclusions
