from __future__ import annotations

"""
Unit tests for the Ignore-File Filtering Engine.

Verifies:
1. Translation of the ignore mini-language (wildcards, anchors, directories).
2. Path relativization against a root.
3. Conversion of ignore files into analyzer globs.
"""

import logging
import os
from pathlib import Path

import pytest

from pendant.core.components.filters import (
    IgnoreFilter,
    ignore_file_to_globs,
    is_ignored_glob,
    read_ignore_file,
)


def test_comments_and_blank_lines_are_skipped() -> None:
    """TC-01: Only real patterns are compiled."""
    f = IgnoreFilter.build(["# comment", "", "   ", "build"])
    assert f.patterns == ("build",)
    assert len(f.compiled) == 1


def test_directory_pattern() -> None:
    """TC-02: 'Packages/' ignores the directory and everything beneath it."""
    f = IgnoreFilter.build(["Packages/"])
    assert f.ignores("Packages")
    assert f.ignores("Packages/Roact/init.luau")
    assert not f.ignores("MyPackages/init.luau")
    assert not f.ignores("src/Packages.luau")


def test_single_star_stays_in_segment() -> None:
    """TC-03: '*' never crosses a separator."""
    f = IgnoreFilter.build(["*.tmp"])
    assert f.ignores("cache.tmp")
    assert not f.ignores("src/cache.tmp")


def test_double_star_crosses_directories() -> None:
    """TC-04: '**/' matches zero or more leading directories."""
    f = IgnoreFilter.build(["**/*.tmp"])
    assert f.ignores("cache.tmp")
    assert f.ignores("src/deep/cache.tmp")
    assert not f.ignores("src/cache.txt")


def test_question_mark_matches_one_character() -> None:
    """TC-05: '?' matches exactly one non-separator character."""
    f = IgnoreFilter.build(["file?.luau"])
    assert f.ignores("file1.luau")
    assert not f.ignores("file10.luau")
    assert not f.ignores("file/.luau")


def test_anchored_pattern_and_literal_characters() -> None:
    """TC-06: Leading '/' is stripped; regex metacharacters are literal."""
    f = IgnoreFilter.build(["/out+dir"])
    assert f.ignores("out+dir/file.luau")
    assert not f.ignores("outtdir/file.luau")


def test_negated_patterns_are_skipped(caplog: pytest.LogCaptureFixture) -> None:
    """TC-07: '!' patterns are not supported and produce a warning."""
    with caplog.at_level(logging.WARNING):
        f = IgnoreFilter.build(["*.log", "!keep.log"])
    assert f.patterns == ("*.log",)
    assert f.ignores("keep.log")
    assert "not supported" in caplog.text


def test_relative_parent_segments_are_stripped() -> None:
    """TC-08: '../' and './' prefixes do not defeat the filter."""
    f = IgnoreFilter.build(["Packages/"])
    assert f.ignores("../Packages/Lib.luau")
    assert f.ignores("./Packages/Lib.luau")
    assert not f.ignores("")


def test_absolute_paths_are_relativized(tmp_path: Path) -> None:
    """TC-09: Absolute paths are made relative to the filter root."""
    f = IgnoreFilter.build(["build/"], root=str(tmp_path))
    assert f.ignores(os.path.join(str(tmp_path), "build", "a.luau"))
    assert not f.ignores(os.path.join(str(tmp_path), "src", "a.luau"))


def test_read_ignore_file(tmp_path: Path) -> None:
    """TC-10: Missing files read as empty; existing files as raw lines."""
    assert read_ignore_file(str(tmp_path / ".gitignore")) == []

    (tmp_path / ".gitignore").write_text("# c\nPackages/\n*.tmp\n", encoding="utf-8")
    assert read_ignore_file(str(tmp_path / ".gitignore")) == ["# c", "Packages/", "*.tmp"]


def test_ignore_file_to_globs() -> None:
    """TC-11: Directory lines become recursive globs, duplicates drop."""
    globs = ignore_file_to_globs(["# c", "/Packages/", "*.tmp", "Packages/", "!x", "out"])
    assert globs == ["Packages/**", "*.tmp", "out"]


def test_is_ignored_glob() -> None:
    """TC-12: The directory behind a recursive glob is tested."""
    f = IgnoreFilter.build(["Packages/", "generated"])
    assert is_ignored_glob("Packages/**", f)
    assert is_ignored_glob("generated/**", f)
    assert not is_ignored_glob("src/shared/**", f)
