# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Render size-reduction statistics for an obfuscation run."""

from rich.console import Console
from rich.filesize import decimal
from rich.table import Table

from cssshuffle.orchestrator import ObfuscationReport


def build_stats_table(report: ObfuscationReport) -> Table:
    """Build a per-file size table with a totals row.

    Args:
        report: Finished run report.

    Returns:
        Rich table ready for printing.
    """
    table = Table(title="css-shuffle")
    table.add_column("File")
    table.add_column("Original Size", justify="right")
    table.add_column("New Size", justify="right")
    table.add_column("Reduced", justify="right")

    original_total = 0
    new_total = 0
    for stats in report.stats:
        original_total += stats.original_size
        new_total += stats.new_size
        table.add_row(
            stats.path,
            decimal(stats.original_size),
            decimal(stats.new_size),
            f"{stats.reduction_percent}%",
        )

    if report.stats:
        reduced = 0
        if original_total:
            reduced = int((original_total - new_total) * 100 / original_total)
        table.add_section()
        table.add_row(
            "Total", decimal(original_total), decimal(new_total), f"{reduced}%"
        )
    return table


def render_stats(report: ObfuscationReport, console: Console) -> None:
    """Print the size table.

    Args:
        report: Finished run report.
        console: Target console.
    """
    if not report.stats:
        console.print("No files changed")
    else:
        console.print(build_stats_table(report))
