# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Run the discover-then-rewrite flow over a build output directory."""

import logging
import shutil
import time
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, TypeVar

import pathspec

from cssshuffle.css_rewriter import rewrite_css
from cssshuffle.css_syntax import CssParseError
from cssshuffle.extractor import extract_identifiers
from cssshuffle.html_rewriter import HtmlParseError, iter_style_blocks, rewrite_html
from cssshuffle.registry import Identifier, NamespaceRegistry

logger = logging.getLogger(__name__)

ProblemKind = Literal["parse", "io"]
SourceKind = Literal["css", "html"]

_T = TypeVar("_T")
_R = TypeVar("_R")


class OrchestrationError(RuntimeError):
    """Represent a failure that aborts the whole run."""


@dataclass(frozen=True)
class ShuffleConfig:
    """Describe one obfuscation run.

    Attributes:
        exclude: Gitignore-style patterns of files to leave untouched.
        workers: Thread count for per-file extraction and rewriting.
        mapping_path: Optional target for the exported mapping artifact.
        css_suffixes: File suffixes processed as stylesheets.
        html_suffixes: File suffixes processed as HTML documents.
    """

    exclude: tuple[str, ...] = ()
    workers: int = 1
    mapping_path: Path | None = None
    css_suffixes: tuple[str, ...] = (".css",)
    html_suffixes: tuple[str, ...] = (".html", ".htm")


@dataclass(frozen=True)
class FileStats:
    """Represent size change of one rewritten file."""

    path: str
    original_size: int
    new_size: int

    @property
    def reduction_percent(self) -> int:
        """Whole-percent size reduction, truncated."""
        if self.original_size == 0:
            return 0
        return int((self.original_size - self.new_size) * 100 / self.original_size)


@dataclass(frozen=True)
class FileProblem:
    """Represent a recoverable per-file failure."""

    path: str
    kind: ProblemKind
    message: str


@dataclass(frozen=True)
class ObfuscationReport:
    """Summarize one obfuscation run.

    Attributes:
        output_root: Directory that holds the rewritten files.
        registry: Frozen alias registry built by discovery.
        css_files: Number of stylesheets found.
        html_files: Number of HTML documents found.
        files_rewritten: Number of files written back.
        identifiers_renamed: Total replacements across all files.
        stats: Size changes of rewritten files.
        problems: Recoverable per-file failures.
        elapsed_ms: Wall-clock duration.
    """

    output_root: Path
    registry: NamespaceRegistry
    css_files: int
    html_files: int
    files_rewritten: int
    identifiers_renamed: int
    stats: tuple[FileStats, ...]
    problems: tuple[FileProblem, ...]
    elapsed_ms: int


@dataclass(frozen=True)
class SourceFile:
    """Represent one file selected for processing."""

    path: Path
    relative_path: str
    kind: SourceKind


@dataclass
class _Discovery:
    identifiers: list[Identifier] = field(default_factory=list)
    problems: list[FileProblem] = field(default_factory=list)


@dataclass
class _Rewrite:
    stats: FileStats | None = None
    identifiers_renamed: int = 0
    problems: list[FileProblem] = field(default_factory=list)


class ExcludeMatcher:
    """Match root-relative paths against gitignore-style patterns."""

    def __init__(self, patterns: Iterable[str]) -> None:
        """Initialize matcher.

        Args:
            patterns: Gitignore-style pattern lines.
        """
        self._spec = pathspec.GitIgnoreSpec.from_lines(list(patterns))

    def matches(self, relative_path: str) -> bool:
        """Check whether a root-relative POSIX path is excluded."""
        return self._spec.match_file(relative_path)


def obfuscate_directory(
    input_dir: Path,
    output_dir: Path | None = None,
    config: ShuffleConfig = ShuffleConfig(),
) -> ObfuscationReport:
    """Obfuscate class, id and custom-property names of a site build.

    Discovery scans every stylesheet, then every inline style block, in
    sorted path order and registers identifiers. The registry is frozen
    before any file is rewritten.

    Args:
        input_dir: Build output directory.
        output_dir: Destination directory; ``None`` rewrites in place.
        config: Run configuration.

    Returns:
        Run report with registry, stats and per-file problems.

    Raises:
        OrchestrationError: If the destination cannot be staged.
    """
    started = time.monotonic()
    root = stage_directory(input_dir=input_dir, output_dir=output_dir)
    sources = collect_sources(root=root, config=config)
    css_sources = [source for source in sources if source.kind == "css"]
    html_sources = [source for source in sources if source.kind == "html"]
    problems: list[FileProblem] = []

    registry = NamespaceRegistry()
    discoveries = _map_files(
        _discover_file, [*css_sources, *html_sources], workers=config.workers
    )
    for discovery in discoveries:
        registry.register_all(discovery.identifiers)
        problems.extend(discovery.problems)
    registry.freeze()
    logger.info(
        "Discovery complete",
        extra={"aliases": len(registry), "files": len(sources)},
    )

    def rewrite(source: SourceFile) -> _Rewrite:
        return _rewrite_file(source, registry)

    stats: list[FileStats] = []
    identifiers_renamed = 0
    for outcome in _map_files(rewrite, sources, workers=config.workers):
        problems.extend(outcome.problems)
        identifiers_renamed += outcome.identifiers_renamed
        if outcome.stats is not None:
            stats.append(outcome.stats)

    if config.mapping_path is not None:
        try:
            registry.write_json(config.mapping_path)
        except OSError as exc:
            logger.warning(
                "Failed writing mapping (path=%s error=%s)", config.mapping_path, exc
            )
            problems.append(
                FileProblem(path=str(config.mapping_path), kind="io", message=str(exc))
            )

    elapsed_ms = int(round((time.monotonic() - started) * 1000))
    return ObfuscationReport(
        output_root=root,
        registry=registry,
        css_files=len(css_sources),
        html_files=len(html_sources),
        files_rewritten=len(stats),
        identifiers_renamed=identifiers_renamed,
        stats=tuple(stats),
        # Discovery and rewrite can both report the same broken file.
        problems=tuple(dict.fromkeys(problems)),
        elapsed_ms=elapsed_ms,
    )


def stage_directory(input_dir: Path, output_dir: Path | None) -> Path:
    """Prepare the directory that will be rewritten.

    A distinct destination is replaced by a fresh copy of the input.

    Args:
        input_dir: Build output directory.
        output_dir: Destination directory or ``None`` for in-place runs.

    Returns:
        Absolute path of the directory to rewrite.

    Raises:
        OrchestrationError: If paths are invalid or copying fails.
    """
    input_abs = input_dir.resolve()
    if not input_abs.is_dir():
        raise OrchestrationError(f"Input path must be a directory: {input_abs}")
    if output_dir is None:
        return input_abs
    output_abs = output_dir.resolve()
    if output_abs == input_abs:
        return input_abs
    if input_abs in output_abs.parents or output_abs in input_abs.parents:
        raise OrchestrationError("Input and output paths must not overlap")

    try:
        if output_abs.exists():
            shutil.rmtree(output_abs)
        shutil.copytree(input_abs, output_abs)
    except OSError as exc:
        logger.warning("Copy failed (error=%s)", exc)
        raise OrchestrationError(f"Copy failed: {exc}") from exc
    return output_abs


def collect_sources(root: Path, config: ShuffleConfig) -> list[SourceFile]:
    """List stylesheets and HTML documents below a root in stable order.

    Args:
        root: Directory to scan.
        config: Run configuration.

    Returns:
        Source files sorted by root-relative path.
    """
    matcher = ExcludeMatcher(config.exclude)
    css_suffixes = {suffix.lower() for suffix in config.css_suffixes}
    html_suffixes = {suffix.lower() for suffix in config.html_suffixes}
    sources: list[SourceFile] = []
    for path in root.rglob("*"):
        suffix = path.suffix.lower()
        if suffix in css_suffixes:
            kind: SourceKind = "css"
        elif suffix in html_suffixes:
            kind = "html"
        else:
            continue
        if not path.is_file():
            continue
        relative_path = path.relative_to(root).as_posix()
        if matcher.matches(relative_path):
            logger.debug("Excluded file (path=%s)", relative_path)
            continue
        sources.append(SourceFile(path=path, relative_path=relative_path, kind=kind))
    return sorted(sources, key=lambda source: source.relative_path)


def _map_files(
    func: Callable[[_T], _R], items: list[_T], workers: int
) -> list[_R]:
    """Apply a per-file function, preserving input order.

    Args:
        func: Per-file function.
        items: Inputs in processing order.
        workers: Thread count; ``1`` runs inline.

    Returns:
        Results in input order.
    """
    if workers <= 1 or len(items) <= 1:
        return [func(item) for item in items]
    with ThreadPoolExecutor(max_workers=workers) as executor:
        return list(executor.map(func, items))


def _discover_file(source: SourceFile) -> _Discovery:
    """Extract identifiers from one stylesheet or from a document's style blocks.

    Args:
        source: File to scan.

    Returns:
        Identifiers in document order plus recoverable problems.
    """
    discovery = _Discovery()
    try:
        text = _read_source(source.path)
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning(
            "Failed reading file (path=%s error=%s)", source.relative_path, exc
        )
        discovery.problems.append(_problem(source, "io", exc))
        return discovery

    if source.kind == "css":
        fragments = [text]
    else:
        try:
            fragments = iter_style_blocks(text)
        except HtmlParseError as exc:
            discovery.problems.append(_problem(source, "parse", exc))
            return discovery

    for fragment in fragments:
        try:
            extracted = extract_identifiers(fragment)
        except CssParseError as exc:
            logger.warning(
                "Skipping fragment during discovery (path=%s error=%s)",
                source.relative_path,
                exc,
            )
            discovery.problems.append(_problem(source, "parse", exc))
            continue
        discovery.identifiers.extend(extracted.identifiers)
    return discovery


def _rewrite_file(source: SourceFile, registry: NamespaceRegistry) -> _Rewrite:
    """Rewrite one file in place when any identifier changes.

    Args:
        source: File to rewrite.
        registry: Frozen alias registry.

    Returns:
        Size stats, counters and recoverable problems.
    """
    outcome = _Rewrite()
    try:
        text = _read_source(source.path)
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning(
            "Failed reading file (path=%s error=%s)", source.relative_path, exc
        )
        outcome.problems.append(_problem(source, "io", exc))
        return outcome

    try:
        if source.kind == "css":
            css_result = rewrite_css(text, registry)
            transformed = css_result.transformed_source
            outcome.identifiers_renamed = css_result.identifiers_renamed
        else:
            html_result = rewrite_html(text, registry)
            transformed = html_result.transformed_source
            outcome.identifiers_renamed = html_result.identifiers_renamed
            for message in html_result.fragment_errors:
                outcome.problems.append(
                    FileProblem(
                        path=source.relative_path, kind="parse", message=message
                    )
                )
    except (CssParseError, HtmlParseError) as exc:
        logger.warning(
            "Failed rewriting file (path=%s error=%s)", source.relative_path, exc
        )
        outcome.problems.append(_problem(source, "parse", exc))
        return outcome

    if transformed == text:
        return outcome
    transformed = _restore_line_endings(text, transformed)

    tmp_path = source.path.with_suffix(f"{source.path.suffix}.tmp")
    try:
        tmp_path.write_text(transformed, encoding="utf-8", newline="")
        tmp_path.replace(source.path)
    except OSError as exc:
        logger.warning(
            "Failed writing file (path=%s error=%s)", source.relative_path, exc
        )
        tmp_path.unlink(missing_ok=True)
        outcome.problems.append(_problem(source, "io", exc))
        return outcome

    outcome.stats = FileStats(
        path=source.relative_path,
        original_size=len(text.encode("utf-8")),
        new_size=len(transformed.encode("utf-8")),
    )
    return outcome


def _read_source(path: Path) -> str:
    with path.open(encoding="utf-8", newline="") as handle:
        return handle.read()


def _restore_line_endings(original: str, transformed: str) -> str:
    """Reapply CRLF line endings dropped by the CSS and HTML parsers.

    Args:
        original: File text as read from disk.
        transformed: Rewritten text.

    Returns:
        Rewritten text using the original's CRLF endings when it had them.
    """
    if "\r\n" not in original or "\r" in transformed:
        return transformed
    return transformed.replace("\n", "\r\n")


def _problem(source: SourceFile, kind: ProblemKind, exc: Exception) -> FileProblem:
    return FileProblem(path=source.relative_path, kind=kind, message=str(exc))