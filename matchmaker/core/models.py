"""
Core data models for the folder synchronization engine.

This module defines the data structures shared by the scanner,
the synchronizer and the command line front end:
- Scanned entry metadata
- Synchronization actions and outcomes
- Synchronization run results

All models are UI-agnostic and type-hinted. Scan entries and
per-entry outcomes are immutable.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Iterator, Optional


# =============================================================================
# Enumerations
# =============================================================================

class SyncAction(Enum):
    """Action taken for one entry during reconciliation."""
    CREATE = auto()    # Entry exists only in the source
    UPDATE = auto()    # File exists on both sides but size/mtime differ
    DELETE = auto()    # Entry exists only in the destination
    CONFLICT = auto()  # Directory on one side, file on the other


class SyncPhase(Enum):
    """Reconciliation phase, in the order they run."""
    DELETE = auto()  # Remove destination entries absent from the source
    COPY = auto()    # Create and update entries from the source


class OutcomeStatus(Enum):
    """Terminal status of an entry within one run."""
    SUCCEEDED = auto()
    FAILED = auto()
    PLANNED = auto()     # Preview mode, nothing touched
    UNRESOLVED = auto()  # Flagged, left as is


# =============================================================================
# Scan Models
# =============================================================================

@dataclass(frozen=True)
class Entry:
    """
    One filesystem object discovered by a scan.

    ``relative_path`` is the index key. ``path`` is the full path as it
    was built during the walk and is what all I/O uses.
    """
    relative_path: str
    path: str
    is_directory: bool
    size: int = 0
    modified_time: int = 0  # Milliseconds since the epoch
    is_hidden: bool = False

    @property
    def is_file(self) -> bool:
        return not self.is_directory

    @property
    def name(self) -> str:
        return os.path.basename(self.relative_path)

    def differs_from(self, other: Entry) -> bool:
        """True if size or modification time differ."""
        return self.size != other.size or self.modified_time != other.modified_time

    def describe(self) -> str:
        """One line of the debugging dump."""
        kind = "DIR" if self.is_directory else "FIL"
        hidden = "H" if self.is_hidden else "-"
        return (f"{self.relative_path}  {kind}: {hidden} "
                f"size = {self.size}; last_modified = {self.modified_time}")


# =============================================================================
# Sync Models
# =============================================================================

@dataclass(frozen=True)
class SyncOutcome:
    """Result of applying (or planning) one action to one entry."""
    relative_path: str
    action: SyncAction
    status: OutcomeStatus
    destination_path: str
    is_directory: bool = False
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == OutcomeStatus.SUCCEEDED

    @property
    def failed(self) -> bool:
        return self.status == OutcomeStatus.FAILED


@dataclass
class SyncResult:
    """Result of a reconciliation run."""
    outcomes: list[SyncOutcome] = field(default_factory=list)
    items_created: int = 0
    items_updated: int = 0
    items_deleted: int = 0
    items_failed: int = 0
    items_unchanged: int = 0
    conflicts: int = 0
    bytes_copied: int = 0
    errors: list[tuple[str, str]] = field(default_factory=list)  # (path, error message)
    duration: float = 0.0
    preview: bool = False

    @property
    def success(self) -> bool:
        return self.items_failed == 0

    @property
    def operation_count(self) -> int:
        """Number of create/update/delete operations recorded."""
        return sum(1 for o in self.outcomes if o.action != SyncAction.CONFLICT)

    def record(self, outcome: SyncOutcome, size: int = 0) -> None:
        """Append an outcome and update the counters."""
        self.outcomes.append(outcome)

        if outcome.status == OutcomeStatus.FAILED:
            self.items_failed += 1
            self.errors.append((outcome.relative_path, outcome.error or "unknown error"))
        elif outcome.status == OutcomeStatus.UNRESOLVED:
            self.conflicts += 1
        elif outcome.status == OutcomeStatus.SUCCEEDED:
            if outcome.action == SyncAction.CREATE:
                self.items_created += 1
            elif outcome.action == SyncAction.UPDATE:
                self.items_updated += 1
            elif outcome.action == SyncAction.DELETE:
                self.items_deleted += 1
            if outcome.action in (SyncAction.CREATE, SyncAction.UPDATE) and not outcome.is_directory:
                self.bytes_copied += size

    def iter_by_action(self, action: SyncAction) -> Iterator[SyncOutcome]:
        """Iterate over outcomes with the given action."""
        for outcome in self.outcomes:
            if outcome.action == action:
                yield outcome

    def iter_failures(self) -> Iterator[SyncOutcome]:
        for outcome in self.outcomes:
            if outcome.failed:
                yield outcome

    def summary(self) -> str:
        """Human-readable one line summary."""
        if self.preview:
            planned = sum(1 for o in self.outcomes if o.status == OutcomeStatus.PLANNED)
            return f"Dry run: {planned} operations planned, {self.conflicts} conflicts"
        return (f"{self.items_created} created, {self.items_updated} updated, "
                f"{self.items_deleted} deleted, {self.items_unchanged} unchanged, "
                f"{self.conflicts} conflicts, {self.items_failed} failed "
                f"({self.bytes_copied} bytes copied in {self.duration:.2f}s)")
