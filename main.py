"""
Main entry point for the MatchMaker folder synchronizer.

This module handles:
- Command line argument parsing
- Logging configuration
- Settings loading
- Root validation
- Scanning both trees and reconciling the destination
- Progress printing and exit codes
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, List

from matchmaker.core.errors import ConfigurationError
from matchmaker.core.folder import (
    FolderScanner,
    FolderSync,
    ScanIndex,
    SyncOptions,
    load_exclusions,
)
from matchmaker.core.models import OutcomeStatus, SyncAction, SyncOutcome, SyncPhase, SyncResult
from matchmaker.services.settings import LOG_LEVELS, ApplicationSettings, SettingsManager


# =============================================================================
# Constants
# =============================================================================

APP_NAME = "MatchMaker"
APP_VERSION = "1.0.0"

EXIT_OK = 0
EXIT_CONFIGURATION_ERROR = 1
EXIT_USAGE_ERROR = 2  # argparse
EXIT_PARTIAL_FAILURE = 3


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class CommandLineArgs:
    """Parsed command line arguments."""
    source_path: str = ""
    destination_path: str = ""
    exclusions_file: Optional[str] = None
    config_file: Optional[str] = None
    dry_run: bool = False
    dump: bool = False
    log_level: Optional[str] = None
    log_file: Optional[str] = None


# =============================================================================
# Logging Setup
# =============================================================================

class LogFormatter(logging.Formatter):
    """Custom log formatter with colors for console."""

    COLORS = {
        logging.INFO: '\033[32m',      # Green
        logging.WARNING: '\033[33m',   # Yellow
        logging.ERROR: '\033[31m',     # Red
        logging.CRITICAL: '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def __init__(self, use_colors: bool = True):
        super().__init__(
            fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        self.use_colors = use_colors and sys.stdout.isatty()

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)

        if self.use_colors:
            color = self.COLORS.get(record.levelno, '')
            return f"{color}{formatted}{self.RESET}"

        return formatted


def setup_logging(level: str = "INFO", log_file: Optional[Path] = None) -> logging.Logger:
    """
    Configure application logging.

    Args:
        level: Log level string
        log_file: Optional file path for logging

    Returns:
        Root logger instance
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(LogFormatter(use_colors=True))
    root_logger.addHandler(console_handler)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(LogFormatter(use_colors=False))
        root_logger.addHandler(file_handler)

    return root_logger


# =============================================================================
# Argument Parsing
# =============================================================================

def parse_arguments(args: Optional[List[str]] = None) -> CommandLineArgs:
    """
    Parse command line arguments.

    Args:
        args: Arguments to parse (defaults to sys.argv)

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Make a destination folder hierarchy match a source folder hierarchy",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s photos /mnt/backup/photos          Synchronize backup with photos
  %(prog)s -n photos /mnt/backup/photos       Show what would change
  %(prog)s -e skip.txt src dst                Use a specific exclusion file
        """
    )

    parser.add_argument('source', help='Source folder')
    parser.add_argument('destination', help='Destination folder')

    parser.add_argument(
        '-e', '--exclusions',
        help='Exclusion file (one full path per line, # for comments)'
    )
    parser.add_argument(
        '-n', '--dry-run',
        action='store_true',
        help='Report what would change without touching the destination'
    )
    parser.add_argument(
        '--dump',
        action='store_true',
        help='Print both scan indexes before synchronizing'
    )

    # Configuration
    parser.add_argument(
        '-c', '--config',
        help='Settings file path'
    )

    # Logging
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose output'
    )
    parser.add_argument(
        '--log-level',
        choices=LOG_LEVELS,
        default=None,
        help='Log level'
    )
    parser.add_argument(
        '--log-file',
        help='Also write the log to this file'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'{APP_NAME} {APP_VERSION}'
    )

    parsed = parser.parse_args(args)

    result = CommandLineArgs()
    result.source_path = parsed.source
    result.destination_path = parsed.destination
    result.exclusions_file = parsed.exclusions
    result.config_file = parsed.config
    result.dry_run = parsed.dry_run
    result.dump = parsed.dump
    result.log_file = parsed.log_file
    result.log_level = 'DEBUG' if parsed.verbose else parsed.log_level

    return result


def apply_overrides(settings: ApplicationSettings, args: CommandLineArgs) -> ApplicationSettings:
    """Command line flags win over the settings file."""
    if args.exclusions_file:
        settings.scan.exclusions_file = args.exclusions_file
    if args.dry_run:
        settings.sync.preview_only = True
    if args.dump:
        settings.sync.dump_indexes = True
    if args.log_level:
        settings.logging.level = args.log_level
    if args.log_file:
        settings.logging.log_file = args.log_file
    return settings


# =============================================================================
# Synchronization
# =============================================================================

def validate_roots(source_path: str, destination_path: str) -> None:
    """
    Refuse to run when the two trees overlap.

    Symbolic links are resolved first, so a root that only points into
    the other tree is caught as well.

    Raises:
        ConfigurationError: the roots are the same folder or nested
    """
    source = os.path.normcase(os.path.realpath(source_path))
    destination = os.path.normcase(os.path.realpath(destination_path))

    try:
        common = os.path.commonpath([source, destination])
    except ValueError:
        # Different drives
        return

    if common in (source, destination):
        raise ConfigurationError(
            f"Source ({source_path}) and destination ({destination_path}) overlap"
        )


def display_path(path: str) -> str:
    """Escape bytes a file name holds that the filesystem encoding cannot decode."""
    return os.fsencode(path).decode(sys.getfilesystemencoding(), 'backslashreplace')


def format_outcome(outcome: SyncOutcome) -> str:
    """Render one progress line."""
    verbs = {
        SyncAction.CREATE: "creating",
        SyncAction.UPDATE: "updating",
        SyncAction.DELETE: "deleting",
        SyncAction.CONFLICT: "conflict",
    }
    line = f"{verbs[outcome.action]} {display_path(outcome.destination_path)}"

    if outcome.status == OutcomeStatus.PLANNED:
        line = f"[dry-run] {line}"
    elif outcome.status == OutcomeStatus.UNRESOLVED:
        line += f"  ({outcome.error}, left unchanged)"
    elif outcome.status == OutcomeStatus.FAILED:
        label = "DELETE FAILED" if outcome.action == SyncAction.DELETE else "FAILED"
        line += f"  {label}: {outcome.error}"

    return line


class ConsoleProgress:
    """Prints phase headers and one line per outcome while a run proceeds."""

    HEADERS = {
        SyncPhase.DELETE: "Deleting files in target...",
        SyncPhase.COPY: "Copying/updating files from source to target...",
    }

    def __init__(self):
        self.phases_started = 0

    def phase_started(self, phase: SyncPhase) -> None:
        if self.phases_started:
            print("")
        self.phases_started += 1
        print(self.HEADERS[phase])

    def outcome_recorded(self, outcome: SyncOutcome) -> None:
        print(format_outcome(outcome))


def print_index(title: str, index: ScanIndex) -> None:
    print(f"{title} ({display_path(index.root_path)}):")
    for line in index.dump():
        print(f"    {display_path(line)}")
    print("")


def run_sync(
    source_path: str,
    destination_path: str,
    settings: ApplicationSettings
) -> SyncResult:
    """
    Scan both trees and reconcile the destination.

    The source scan honors exclusions; the destination scan does not, so
    leftovers of previously excluded paths get removed.

    Raises:
        ConfigurationError: bad or overlapping roots, before any change
    """
    validate_roots(source_path, destination_path)

    scanner = FolderScanner(load_exclusions(settings.scan.exclusions_file))

    print("Building file lists...")
    print(f"    Scanning source: {display_path(source_path)}")
    source_index = scanner.scan(source_path, honor_exclusions=True)

    print(f"    Scanning target: {display_path(destination_path)}")
    destination_index = scanner.scan(destination_path, honor_exclusions=False)
    print("")

    if settings.sync.dump_indexes:
        print_index("Source index", source_index)
        print_index("Target index", destination_index)

    sync = FolderSync(SyncOptions(
        preview_only=settings.sync.preview_only,
        delete_extraneous=settings.sync.delete_extraneous,
    ))

    progress = ConsoleProgress()
    result = sync.reconcile(
        source_index,
        destination_index,
        destination_path,
        progress_callback=progress.outcome_recorded,
        phase_callback=progress.phase_started,
    )
    print("")

    print(result.summary())
    return result


# =============================================================================
# Main Function
# =============================================================================

def main(argv: Optional[List[str]] = None) -> int:
    """
    Application main entry point.

    Returns:
        Exit code (0 for success)
    """
    args = parse_arguments(argv)

    settings_manager = SettingsManager(Path(args.config_file) if args.config_file else None)
    settings = apply_overrides(settings_manager.settings, args)

    log_file = Path(settings.logging.log_file) if settings.logging.log_file else None
    logger = setup_logging(settings.logging.level, log_file)
    logger.debug(f"Starting {APP_NAME} v{APP_VERSION}")

    try:
        result = run_sync(args.source_path, args.destination_path, settings)
    except ConfigurationError as e:
        logger.error(str(e))
        print(f"Error: {display_path(str(e))}", file=sys.stderr)
        return EXIT_CONFIGURATION_ERROR

    if not result.success:
        logger.warning(f"{result.items_failed} operations failed")
        return EXIT_PARTIAL_FAILURE

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
