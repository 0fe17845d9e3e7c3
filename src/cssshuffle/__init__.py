# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Public import surface for CSS name obfuscation components."""

from cssshuffle.alias import generate
from cssshuffle.css_rewriter import CssRewriteResult, rewrite_css
from cssshuffle.css_syntax import CssParseError
from cssshuffle.extractor import ExtractedIdentifiers, extract_identifiers
from cssshuffle.html_rewriter import (
    HtmlParseError,
    HtmlRewriteResult,
    iter_style_blocks,
    rewrite_html,
)
from cssshuffle.orchestrator import (
    FileProblem,
    FileStats,
    ObfuscationReport,
    OrchestrationError,
    ShuffleConfig,
    obfuscate_directory,
)
from cssshuffle.registry import (
    Identifier,
    MappingEntry,
    Namespace,
    NamespaceRegistry,
    RegistryFrozenError,
)

__all__ = [
    "CssParseError",
    "CssRewriteResult",
    "ExtractedIdentifiers",
    "FileProblem",
    "FileStats",
    "HtmlParseError",
    "HtmlRewriteResult",
    "Identifier",
    "MappingEntry",
    "Namespace",
    "NamespaceRegistry",
    "ObfuscationReport",
    "OrchestrationError",
    "RegistryFrozenError",
    "ShuffleConfig",
    "extract_identifiers",
    "generate",
    "iter_style_blocks",
    "obfuscate_directory",
    "rewrite_css",
    "rewrite_html",
]
