"""
Application settings management.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Optional

from matchmaker.core.folder.exclusions import DEFAULT_EXCLUSIONS_FILE

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


@dataclass
class ScanSettings:
    """Settings for scanning."""
    exclusions_file: str = DEFAULT_EXCLUSIONS_FILE


@dataclass
class SyncSettings:
    """Settings for reconciliation."""
    preview_only: bool = False
    delete_extraneous: bool = True
    dump_indexes: bool = False


@dataclass
class LoggingSettings:
    """Logging settings."""
    level: str = "INFO"
    log_file: Optional[str] = None


@dataclass
class ApplicationSettings:
    """Main application settings container."""
    scan: ScanSettings = field(default_factory=ScanSettings)
    sync: SyncSettings = field(default_factory=SyncSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)


class SettingsManager:
    """Manager for loading/saving application settings."""

    def __init__(self, settings_path: Optional[Path] = None):
        self.settings_path = Path(settings_path) if settings_path else self._get_default_path()
        self._settings: Optional[ApplicationSettings] = None

    @staticmethod
    def _get_default_path() -> Path:
        """Get the default settings file path."""
        if os.name == 'nt':
            # Windows
            app_data = os.environ.get('APPDATA', os.path.expanduser('~'))
            return Path(app_data) / 'MatchMaker' / 'settings.json'
        else:
            # Linux/Mac
            config_home = os.environ.get('XDG_CONFIG_HOME',
                                         os.path.expanduser('~/.config'))
            return Path(config_home) / 'matchmaker' / 'settings.json'

    @property
    def settings(self) -> ApplicationSettings:
        """Get current settings, loading from disk if needed."""
        if self._settings is None:
            self._settings = self.load()
        return self._settings

    def load(self) -> ApplicationSettings:
        """Load settings from disk. Missing or unreadable files give defaults."""
        if not self.settings_path.exists():
            return ApplicationSettings()

        try:
            with open(self.settings_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logging.warning(f"SettingsManager - Could not load {self.settings_path}, using defaults: {e}")
            return ApplicationSettings()

        if not isinstance(data, dict):
            logging.warning(f"SettingsManager - Ignoring malformed settings in {self.settings_path}")
            return ApplicationSettings()

        return self._from_dict(data)

    def save(self, settings: Optional[ApplicationSettings] = None) -> bool:
        """Save settings to disk."""
        settings = settings or self._settings
        if settings is None:
            return False

        try:
            self.settings_path.parent.mkdir(parents=True, exist_ok=True)

            with open(self.settings_path, 'w', encoding='utf-8') as f:
                json.dump(self._to_dict(settings), f, indent=2)
        except OSError as e:
            logging.warning(f"SettingsManager - Could not save {self.settings_path}: {e}")
            return False

        self._settings = settings
        return True

    def reset(self) -> ApplicationSettings:
        """Reset to default settings."""
        self._settings = ApplicationSettings()
        self.save()
        return self._settings

    def _to_dict(self, settings: ApplicationSettings) -> dict:
        """Convert settings to dictionary for JSON serialization."""
        return asdict(settings)

    def _from_dict(self, data: dict) -> ApplicationSettings:
        """Convert dictionary back to settings objects."""
        def section(name: str) -> dict[str, Any]:
            value = data.get(name, {})
            return value if isinstance(value, dict) else {}

        scan = ScanSettings(
            exclusions_file=section('scan').get('exclusions_file', DEFAULT_EXCLUSIONS_FILE),
        )

        sync = SyncSettings(
            preview_only=bool(section('sync').get('preview_only', False)),
            delete_extraneous=bool(section('sync').get('delete_extraneous', True)),
            dump_indexes=bool(section('sync').get('dump_indexes', False)),
        )

        level = str(section('logging').get('level', 'INFO')).upper()
        log = LoggingSettings(
            level=level if level in LOG_LEVELS else 'INFO',
            log_file=section('logging').get('log_file'),
        )

        return ApplicationSettings(scan=scan, sync=sync, logging=log)
