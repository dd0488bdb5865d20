"""
Folder synchronization engine.

One-way reconciliation of a destination tree against a source tree:
- Delete phase: remove destination entries absent from the source
- Create/update phase: copy new and changed source entries
- Per-entry failure isolation (no rollback)
- Preview mode
- Progress reporting

Both phases are driven by ScanIndex snapshots taken before any change.
"""

from __future__ import annotations

import logging
import os
import shutil
import time
from dataclasses import dataclass
from typing import Callable, Optional

from matchmaker.core.folder.scanner import ScanIndex
from matchmaker.core.models import (
    Entry,
    OutcomeStatus,
    SyncAction,
    SyncOutcome,
    SyncPhase,
    SyncResult,
)

ProgressCallback = Callable[[SyncOutcome], None]
PhaseCallback = Callable[[SyncPhase], None]


@dataclass
class SyncOptions:
    """Options for synchronization."""
    preview_only: bool = False       # Don't actually make changes
    delete_extraneous: bool = True   # Delete destination entries absent from source


class FolderSync:
    """
    Makes a destination tree match a source tree.

    The source wins: destination-only entries are removed, new source
    entries are created, and files whose size or modification time
    differ are overwritten. A path that is a directory on one side and
    a file on the other is reported as a conflict and left alone.
    """

    def __init__(self, options: Optional[SyncOptions] = None):
        self.options = options or SyncOptions()

    def reconcile(
        self,
        source_index: ScanIndex,
        destination_index: ScanIndex,
        destination_root: str,
        progress_callback: Optional[ProgressCallback] = None,
        phase_callback: Optional[PhaseCallback] = None
    ) -> SyncResult:
        """
        Reconcile the destination with the source.

        The delete phase runs to completion before the create/update phase
        starts. Failures are recorded per entry and never abort the run.

        Args:
            source_index: Scan of the source tree
            destination_index: Scan of the destination tree
            destination_root: Root of the destination tree, as scanned
            progress_callback: Called with each outcome as it is recorded
            phase_callback: Called with each phase as it starts

        Returns:
            SyncResult with one outcome per attempted operation
        """
        self._check_indexes(source_index, destination_index)
        if not destination_root:
            raise ValueError("destination_root is required")

        start_time = time.time()
        result = SyncResult(preview=self.options.preview_only)

        if self.options.delete_extraneous:
            if phase_callback:
                phase_callback(SyncPhase.DELETE)
            self.delete_phase(source_index, destination_index, result, progress_callback)

        if phase_callback:
            phase_callback(SyncPhase.COPY)
        self.copy_phase(source_index, destination_index, destination_root, result, progress_callback)

        result.duration = time.time() - start_time
        logging.info(f"FolderSync - {result.summary()}")
        return result

    def delete_phase(
        self,
        source_index: ScanIndex,
        destination_index: ScanIndex,
        result: SyncResult,
        progress_callback: Optional[ProgressCallback] = None
    ) -> None:
        """
        Remove destination entries that are not in the source.

        Relies on the destination index listing a directory's contents
        before the directory, so a removed subtree goes leaf first and
        each directory is empty by the time it is removed.
        """
        self._check_indexes(source_index, destination_index)
        logging.info("FolderSync - Deleting entries absent from source")

        for relative_path, entry in destination_index.items():
            if relative_path in source_index:
                continue
            self._record(result, self._delete_entry(entry), progress_callback)

    def copy_phase(
        self,
        source_index: ScanIndex,
        destination_index: ScanIndex,
        destination_root: str,
        result: SyncResult,
        progress_callback: Optional[ProgressCallback] = None
    ) -> None:
        """
        Create or update destination entries from the source.

        Walks the source index backwards so that a directory is created
        before anything inside it. Presence is decided by the destination
        index snapshot, not by looking at the disk again.
        """
        self._check_indexes(source_index, destination_index)
        if not destination_root:
            raise ValueError("destination_root is required")
        destination_root = os.fspath(destination_root)
        logging.info("FolderSync - Copying new and changed entries")

        for relative_path in reversed(source_index):
            source_entry = source_index[relative_path]
            destination_entry = destination_index.get(relative_path)

            if destination_entry is None:
                destination_path = destination_root + os.sep + relative_path
                outcome = self._create_entry(source_entry, destination_path)
            elif source_entry.is_directory != destination_entry.is_directory:
                outcome = self._flag_conflict(source_entry, destination_entry)
            elif source_entry.is_file and source_entry.differs_from(destination_entry):
                outcome = self._update_entry(source_entry, destination_entry)
            else:
                result.items_unchanged += 1
                continue

            self._record(result, outcome, progress_callback, source_entry.size)

    @staticmethod
    def _check_indexes(source_index: ScanIndex, destination_index: ScanIndex) -> None:
        if source_index is None or destination_index is None:
            raise TypeError("source_index and destination_index are required")

    @staticmethod
    def _record(
        result: SyncResult,
        outcome: SyncOutcome,
        progress_callback: Optional[ProgressCallback],
        size: int = 0
    ) -> None:
        result.record(outcome, size)
        if progress_callback:
            progress_callback(outcome)

    def _delete_entry(self, entry: Entry) -> SyncOutcome:
        if self.options.preview_only:
            return self._outcome(entry, SyncAction.DELETE, OutcomeStatus.PLANNED, entry.path)

        try:
            if entry.is_directory:
                os.rmdir(entry.path)
            else:
                os.remove(entry.path)
        except OSError as e:
            logging.warning(f"FolderSync - Failed to delete {entry.path}: {e}")
            return self._outcome(entry, SyncAction.DELETE, OutcomeStatus.FAILED, entry.path, str(e))

        return self._outcome(entry, SyncAction.DELETE, OutcomeStatus.SUCCEEDED, entry.path)

    def _create_entry(self, source: Entry, destination_path: str) -> SyncOutcome:
        if self.options.preview_only:
            return self._outcome(source, SyncAction.CREATE, OutcomeStatus.PLANNED, destination_path)

        try:
            if source.is_directory:
                # Contents are copied later in the reversed walk. The directory
                # keeps the current time as its modification time.
                os.mkdir(destination_path)
            else:
                self._copy_file(source.path, destination_path)
        except OSError as e:
            logging.warning(f"FolderSync - Failed to create {destination_path}: {e}")
            return self._outcome(source, SyncAction.CREATE, OutcomeStatus.FAILED, destination_path, str(e))

        return self._outcome(source, SyncAction.CREATE, OutcomeStatus.SUCCEEDED, destination_path)

    def _update_entry(self, source: Entry, destination: Entry) -> SyncOutcome:
        if self.options.preview_only:
            return self._outcome(source, SyncAction.UPDATE, OutcomeStatus.PLANNED, destination.path)

        try:
            self._copy_file(source.path, destination.path)
        except OSError as e:
            logging.warning(f"FolderSync - Failed to update {destination.path}: {e}")
            return self._outcome(source, SyncAction.UPDATE, OutcomeStatus.FAILED, destination.path, str(e))

        return self._outcome(source, SyncAction.UPDATE, OutcomeStatus.SUCCEEDED, destination.path)

    def _flag_conflict(self, source: Entry, destination: Entry) -> SyncOutcome:
        source_kind = "directory" if source.is_directory else "file"
        destination_kind = "directory" if destination.is_directory else "file"
        reason = f"{source_kind} in source, {destination_kind} in destination"
        logging.warning(f"FolderSync - Unresolved type conflict at {destination.path}: {reason}")
        return self._outcome(source, SyncAction.CONFLICT, OutcomeStatus.UNRESOLVED, destination.path, reason)

    @staticmethod
    def _copy_file(source: str, destination: str) -> None:
        """
        Copy file content and attributes, overwriting the destination.

        An existing file or symbolic link at the destination is removed first,
        so read-only files are replaced and links are never written through.
        An existing directory at the destination makes the copy fail.
        """
        if os.path.islink(destination) or os.path.isfile(destination):
            os.unlink(destination)
        shutil.copyfile(source, destination, follow_symlinks=False)
        shutil.copystat(source, destination, follow_symlinks=False)

    @staticmethod
    def _outcome(
        entry: Entry,
        action: SyncAction,
        status: OutcomeStatus,
        destination_path: str,
        error: Optional[str] = None
    ) -> SyncOutcome:
        return SyncOutcome(
            relative_path=entry.relative_path,
            action=action,
            status=status,
            destination_path=destination_path,
            is_directory=entry.is_directory,
            error=error,
        )


def reconcile(
    source_index: ScanIndex,
    destination_index: ScanIndex,
    destination_root: str,
    progress_callback: Optional[ProgressCallback] = None,
    options: Optional[SyncOptions] = None,
    phase_callback: Optional[PhaseCallback] = None
) -> SyncResult:
    """Convenience wrapper around FolderSync.reconcile."""
    return FolderSync(options).reconcile(
        source_index, destination_index, destination_root, progress_callback, phase_callback
    )
