from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from matchmaker.services.settings import ApplicationSettings, SettingsManager


def test_missing_file_gives_defaults(tmp_path: Path) -> None:
    manager = SettingsManager(tmp_path / "settings.json")

    settings = manager.settings

    assert settings == ApplicationSettings()
    assert settings.scan.exclusions_file == "exclusions.txt"
    assert settings.sync.delete_extraneous
    assert not settings.sync.preview_only
    assert settings.logging.level == "INFO"


def test_save_then_load(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "settings.json"
    manager = SettingsManager(path)
    settings = manager.settings
    settings.scan.exclusions_file = "/etc/matchmaker/skip.txt"
    settings.sync.preview_only = True
    settings.logging.level = "DEBUG"
    settings.logging.log_file = "/var/log/matchmaker.log"

    assert manager.save()

    reloaded = SettingsManager(path).load()
    assert reloaded == settings
    assert json.loads(path.read_text(encoding="utf-8"))["sync"]["preview_only"] is True


def test_partial_file_fills_in_defaults(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"sync": {"dump_indexes": True}, "logging": "nonsense"}), encoding="utf-8")

    settings = SettingsManager(path).load()

    assert settings.sync.dump_indexes
    assert settings.sync.delete_extraneous
    assert settings.logging.level == "INFO"


def test_unknown_log_level_falls_back_to_info(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"logging": {"level": "chatty"}}), encoding="utf-8")

    assert SettingsManager(path).load().logging.level == "INFO"


def test_malformed_json_gives_defaults(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")

    assert SettingsManager(path).load() == ApplicationSettings()


def test_non_object_json_gives_defaults(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")

    assert SettingsManager(path).load() == ApplicationSettings()


def test_reset_writes_defaults(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"sync": {"preview_only": True}}), encoding="utf-8")
    manager = SettingsManager(path)

    assert manager.settings.sync.preview_only
    manager.reset()

    assert not SettingsManager(path).load().sync.preview_only


@pytest.mark.skipif(os.name == "nt", reason="uses APPDATA on Windows")
def test_default_path_follows_xdg(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))

    assert SettingsManager().settings_path == tmp_path / "matchmaker" / "settings.json"
