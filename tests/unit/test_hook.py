# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for the build hook and size report."""

import io
from pathlib import Path

from rich.console import Console

from cssshuffle.hook import build_done


def _write_file(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _console(buffer: io.StringIO) -> Console:
    return Console(file=buffer, force_terminal=False, width=200)


def test_shf_801_build_hook_rewrites_in_place_and_prints_table(
    tmp_path: Path,
) -> None:
    build = tmp_path / "dist"
    _write_file(build / "styles" / "site.css", ".navigation-bar{--brand-color:red}")
    buffer = io.StringIO()

    report = build_done(build, console=_console(buffer))

    assert (build / "styles" / "site.css").read_text(encoding="utf-8") == (
        ".a{--b:red}"
    )
    output = buffer.getvalue()
    assert "styles/site.css" in output
    assert "Original Size" in output
    assert "Total" in output
    assert report.files_rewritten == 1


def test_shf_802_build_hook_reports_when_nothing_changes(tmp_path: Path) -> None:
    build = tmp_path / "dist"
    _write_file(build / "index.html", "<p>plain</p>")
    buffer = io.StringIO()

    report = build_done(str(build), console=_console(buffer))

    assert "No files changed" in buffer.getvalue()
    assert report.files_rewritten == 0


def test_shf_803_build_hook_can_skip_report(tmp_path: Path) -> None:
    build = tmp_path / "dist"
    _write_file(build / "site.css", ".x{}")
    buffer = io.StringIO()

    build_done(build, console=_console(buffer), report=False)

    assert buffer.getvalue() == ""
