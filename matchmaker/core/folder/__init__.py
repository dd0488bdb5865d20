"""
Folder synchronization module.

Provides functionality for:
- Recursive directory scanning into a post-ordered index
- Exclusion list loading
- One-way reconciliation of a destination tree
"""

from matchmaker.core.folder.scanner import (
    FolderScanner,
    ScanIndex,
    scan,
)
from matchmaker.core.folder.exclusions import (
    DEFAULT_EXCLUSIONS_FILE,
    load_exclusions,
    normalize_separators,
)
from matchmaker.core.folder.sync import (
    FolderSync,
    SyncOptions,
    reconcile,
)

__all__ = [
    # Scanner
    'FolderScanner',
    'ScanIndex',
    'scan',
    # Exclusions
    'DEFAULT_EXCLUSIONS_FILE',
    'load_exclusions',
    'normalize_separators',
    # Sync
    'FolderSync',
    'SyncOptions',
    'reconcile',
]
