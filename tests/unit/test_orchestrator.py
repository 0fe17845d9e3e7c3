# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Cross-file obfuscation tests for the discover-then-rewrite flow."""

from pathlib import Path

import pytest

from cssshuffle import (
    NamespaceRegistry,
    OrchestrationError,
    ShuffleConfig,
    obfuscate_directory,
)


def _write_file(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _build_site(root: Path) -> None:
    _write_file(root / "a.css", ".card{--accent:red}")
    _write_file(root / "assets" / "b.css", ".card .title{color:var(--accent)}")
    _write_file(
        root / "index.html",
        "<html><head><style>#hero{color:var(--accent)}</style></head>"
        '<body><section id="hero" class="card title onlyhtml">'
        '<a href="#hero">top</a></section></body></html>',
    )


def test_shf_601_orchestrator_rewrites_all_files_consistently(tmp_path: Path) -> None:
    site = tmp_path / "site"
    _build_site(site)

    report = obfuscate_directory(input_dir=site)

    assert report.registry.mapping("class") == {"card": "a", "title": "c"}
    assert report.registry.mapping("custom_property") == {"accent": "b"}
    assert report.registry.mapping("id") == {"hero": "d"}
    assert (site / "a.css").read_text(encoding="utf-8") == ".a{--b:red}"
    assert (site / "assets" / "b.css").read_text(encoding="utf-8") == (
        ".a .c{color:var(--b)}"
    )
    html = (site / "index.html").read_text(encoding="utf-8")
    assert "<style>#d{color:var(--b)}</style>" in html
    assert 'id="d"' in html
    assert 'class="a c onlyhtml"' in html
    assert 'href="#d"' in html
    assert report.css_files == 2
    assert report.html_files == 1
    assert report.files_rewritten == 3
    assert report.problems == ()


def test_shf_602_orchestrator_copies_to_output_and_keeps_input(tmp_path: Path) -> None:
    site = tmp_path / "site"
    output = tmp_path / "dist"
    _build_site(site)
    _write_file(output / "stale.txt", "old")

    report = obfuscate_directory(input_dir=site, output_dir=output)

    assert report.output_root == output.resolve()
    assert (site / "a.css").read_text(encoding="utf-8") == ".card{--accent:red}"
    assert (output / "a.css").read_text(encoding="utf-8") == ".a{--b:red}"
    assert not (output / "stale.txt").exists()


def test_shf_603_orchestrator_isolates_parse_errors(tmp_path: Path) -> None:
    site = tmp_path / "site"
    broken = '.broken{content:"oops\n}'
    _write_file(site / "broken.css", broken)
    _write_file(site / "good.css", ".good{color:red}")

    report = obfuscate_directory(input_dir=site)

    assert (site / "broken.css").read_text(encoding="utf-8") == broken
    assert (site / "good.css").read_text(encoding="utf-8") == ".a{color:red}"
    assert report.registry.lookup("class", "broken") is None
    parse_problems = [problem for problem in report.problems if problem.kind == "parse"]
    assert {problem.path for problem in parse_problems} == {"broken.css"}


def test_shf_604_orchestrator_reports_unreadable_files(tmp_path: Path) -> None:
    site = tmp_path / "site"
    (site).mkdir()
    (site / "latin1.css").write_bytes(b".caf\xe9{color:red}")
    _write_file(site / "ok.css", ".ok{}")

    report = obfuscate_directory(input_dir=site)

    assert {problem.kind for problem in report.problems} == {"io"}
    assert {problem.path for problem in report.problems} == {"latin1.css"}
    assert (site / "ok.css").read_text(encoding="utf-8") == ".a{}"


def test_shf_605_orchestrator_is_deterministic_across_worker_counts(
    tmp_path: Path,
) -> None:
    first = tmp_path / "first"
    second = tmp_path / "second"
    for root in (first, second):
        for number in range(12):
            _write_file(
                root / f"page-{number:02d}.css",
                f".c{number}{{--v{number}:1}}#i{number}{{x:var(--v{number})}}",
            )

    sequential = obfuscate_directory(input_dir=first, config=ShuffleConfig(workers=1))
    threaded = obfuscate_directory(input_dir=second, config=ShuffleConfig(workers=4))

    assert list(sequential.registry.entries()) == list(threaded.registry.entries())


def test_shf_606_orchestrator_skips_excluded_paths(tmp_path: Path) -> None:
    site = tmp_path / "site"
    _write_file(site / "vendor" / "lib.css", ".lib{color:red}")
    _write_file(site / "main.css", ".main{color:red}")

    report = obfuscate_directory(
        input_dir=site, config=ShuffleConfig(exclude=("vendor/",))
    )

    assert (site / "vendor" / "lib.css").read_text(encoding="utf-8") == (
        ".lib{color:red}"
    )
    assert report.registry.lookup("class", "lib") is None
    assert report.css_files == 1


def test_shf_607_orchestrator_exports_mapping(tmp_path: Path) -> None:
    site = tmp_path / "site"
    _build_site(site)
    mapping_path = tmp_path / "mapping.json"

    report = obfuscate_directory(
        input_dir=site, config=ShuffleConfig(mapping_path=mapping_path)
    )
    restored = NamespaceRegistry.from_json(mapping_path.read_text(encoding="utf-8"))

    assert list(restored.entries()) == list(report.registry.entries())


def test_shf_608_orchestrator_rejects_invalid_paths(tmp_path: Path) -> None:
    site = tmp_path / "site"
    _build_site(site)

    with pytest.raises(OrchestrationError):
        obfuscate_directory(input_dir=tmp_path / "missing")
    with pytest.raises(OrchestrationError):
        obfuscate_directory(input_dir=site, output_dir=site / "nested")


def test_shf_609_orchestrator_records_size_reduction(tmp_path: Path) -> None:
    site = tmp_path / "site"
    _write_file(site / "style.css", ".very-long-class-name{color:red}")
    _write_file(site / "untouched.css", "body{margin:0}")

    report = obfuscate_directory(input_dir=site)

    assert len(report.stats) == 1
    stats = report.stats[0]
    assert stats.path == "style.css"
    assert stats.original_size == len(".very-long-class-name{color:red}")
    assert stats.new_size == len(".a{color:red}")
    assert stats.reduction_percent == 59


def test_shf_610_orchestrator_rewrites_stylesheets_with_at_rules(
    tmp_path: Path,
) -> None:
    site = tmp_path / "site"
    _write_file(site / "a.css", "@media (min-width:1px){.wide{color:red}}")
    _write_file(site / "b.css", "@font-face{font-family:x}.narrow{gap:0}")

    report = obfuscate_directory(input_dir=site)

    assert report.problems == ()
    assert report.registry.mapping("class") == {"wide": "a", "narrow": "b"}
    assert (site / "a.css").read_text(encoding="utf-8") == (
        "@media (min-width:1px){.a{color:red}}"
    )
    assert (site / "b.css").read_text(encoding="utf-8") == (
        "@font-face{font-family:x}.b{gap:0}"
    )


def test_shf_611_orchestrator_keeps_crlf_line_endings(tmp_path: Path) -> None:
    site = tmp_path / "site"
    site.mkdir()
    (site / "style.css").write_bytes(b".foo{color:red}\r\n.bar{color:blue}\r\n")

    obfuscate_directory(input_dir=site)

    assert (site / "style.css").read_bytes() == (
        b".a{color:red}\r\n.b{color:blue}\r\n"
    )


def test_shf_612_orchestrator_removes_temp_file_when_replace_fails(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    site = tmp_path / "site"
    _write_file(site / "style.css", ".foo{color:red}")

    def _fail_replace(self: Path, target: Path) -> Path:
        raise OSError("replace refused")

    monkeypatch.setattr(Path, "replace", _fail_replace)

    report = obfuscate_directory(input_dir=site)

    assert [problem.kind for problem in report.problems] == ["io"]
    assert list(site.rglob("*.tmp")) == []
    assert (site / "style.css").read_text(encoding="utf-8") == ".foo{color:red}"
    assert report.files_rewritten == 0
