# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Entry point for static-site generators at the end of a build."""

import logging
from pathlib import Path

from rich.console import Console

from cssshuffle.orchestrator import (
    ObfuscationReport,
    ShuffleConfig,
    obfuscate_directory,
)
from cssshuffle.stats import render_stats

logger = logging.getLogger(__name__)


def build_done(
    build_dir: Path | str,
    console: Console | None = None,
    report: bool = True,
    config: ShuffleConfig = ShuffleConfig(),
) -> ObfuscationReport:
    """Obfuscate a finished build in place.

    Args:
        build_dir: Build output directory.
        console: Console for the size report; stdout when omitted.
        report: Whether to print the size report.
        config: Run configuration.

    Returns:
        Run report.
    """
    result = obfuscate_directory(input_dir=Path(build_dir), config=config)
    logger.info(
        "Build obfuscated",
        extra={
            "files_rewritten": result.files_rewritten,
            "problems": len(result.problems),
        },
    )
    for problem in result.problems:
        logger.warning(
            "Problem during obfuscation (kind=%s path=%s error=%s)",
            problem.kind,
            problem.path,
            problem.message,
        )
    if report:
        render_stats(result, console or Console())
    return result
