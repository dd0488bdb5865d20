from __future__ import annotations

import os
from pathlib import Path

from matchmaker.core.folder.exclusions import load_exclusions, normalize_separators, parse_exclusions


def test_load_exclusions_skips_comments_and_blank_lines(tmp_path: Path) -> None:
    exclusions_file = tmp_path / "exclusions.txt"
    exclusions_file.write_text(
        "# build output\n"
        "/data/project/build\n"
        "\n"
        "/data/project/.cache\n"
        "#/data/project/keep\n",
        encoding="utf-8",
    )

    exclusions = load_exclusions(exclusions_file)

    assert exclusions == frozenset({
        normalize_separators("/data/project/build"),
        normalize_separators("/data/project/.cache"),
    })


def test_missing_exclusion_file_is_empty(tmp_path: Path) -> None:
    assert load_exclusions(tmp_path / "absent.txt") == frozenset()


def test_unreadable_exclusion_file_is_empty(tmp_path: Path) -> None:
    # A directory in place of the file cannot be opened for reading.
    assert load_exclusions(tmp_path) == frozenset()


def test_default_file_is_process_relative(tmp_path: Path, monkeypatch) -> None:
    (tmp_path / "exclusions.txt").write_text("/srv/skip\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)

    assert load_exclusions() == frozenset({normalize_separators("/srv/skip")})


def test_separators_are_normalized_to_host() -> None:
    assert normalize_separators("a/b\\c") == os.sep.join(["a", "b", "c"])
    assert parse_exclusions(["C:\\work\\tmp\n"]) == frozenset({os.sep.join(["C:", "work", "tmp"])})


def test_whitespace_is_part_of_the_path() -> None:
    exclusions = parse_exclusions([
        "/data/trailing space \n",
        "  /data/leading\r\n",
        "  #not a comment\n",
        "#comment\n",
        "\n",
    ])

    assert exclusions == frozenset({
        normalize_separators("/data/trailing space "),
        normalize_separators("  /data/leading"),
        "  #not a comment",
    })
