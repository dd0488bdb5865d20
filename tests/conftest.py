"""Pytest bootstrap and shared tree-building fixtures.

The ``pytest`` console script can run with a sys.path that excludes the
repository root. Ensure ``import main`` and ``import matchmaker`` resolve to
the local sources.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest


PROJECT_ROOT = Path(__file__).resolve().parent.parent
PROJECT_ROOT_STR = str(PROJECT_ROOT)

if PROJECT_ROOT_STR not in sys.path:
    sys.path.insert(0, PROJECT_ROOT_STR)


def make_tree(root: Path, layout: dict) -> Path:
    """Create files and folders from a nested dict. Strings are file contents."""
    root.mkdir(parents=True, exist_ok=True)
    for name, value in layout.items():
        path = root / name
        if isinstance(value, dict):
            make_tree(path, value)
        else:
            path.write_text(value, encoding="utf-8")
    return root


def read_tree(root: Path) -> dict:
    """Inverse of make_tree, ignoring symbolic links."""
    result = {}
    for child in sorted(root.iterdir()):
        if child.is_symlink():
            continue
        if child.is_dir():
            result[child.name] = read_tree(child)
        else:
            result[child.name] = child.read_text(encoding="utf-8")
    return result


def set_mtime(path: Path, seconds: float) -> None:
    os.utime(path, (seconds, seconds))


@pytest.fixture
def source_root(tmp_path: Path) -> Path:
    return tmp_path / "source"


@pytest.fixture
def destination_root(tmp_path: Path) -> Path:
    return tmp_path / "destination"


requires_symlinks = pytest.mark.skipif(
    not hasattr(os, "symlink") or os.name == "nt",
    reason="symbolic links not available",
)

