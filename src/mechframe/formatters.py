"""Output formatters for ranking reports.

This module provides functions to format ScoringReport and
ReconciliationReport objects for different output formats: console
tables, Markdown, and JSON.
"""

from __future__ import annotations

from mechframe.results.reports import ReconciliationReport, ScoringReport


def format_console_table(report: ScoringReport, show_top: bool = True) -> str:
    """Format a report as a console-friendly ASCII table.

    Parameters
    ----------
    report : ScoringReport or ReconciliationReport
        Report to format
    show_top : bool, optional
        Include the top-ranked frames table. Default True.

    Returns
    -------
    str
        Formatted ASCII table string
    """
    digits = report.round_digits
    lines = []

    lines.append("")
    lines.append(f"Frame Ranking: {report.name}")
    lines.append("=" * 60)
    lines.append(f"Series: {', '.join(report.series_names)}")
    lines.append(f"Combination: {report.combination}")
    lines.append(f"Frames analyzed: {report.n_frames}")
    lines.append("")

    lines.append(f"{'Best frame':<28} {report.best_frame}")
    lines.append(f"{'Composite score':<28} {report.composite_score:.4f}")
    lines.append(f"{'DMCS':<28} {report.dmcs_rounded:.{digits}f}")

    if isinstance(report, ReconciliationReport):
        cluster = "none" if report.cluster_id is None else str(report.cluster_id)
        lines.append(f"{'Best frame cluster':<28} {cluster}")
        lines.append(
            f"{'Dominant cluster':<28} {report.dominant_cluster_id} "
            f"(pop {report.dominant_population}, rep {report.dominant_representative})"
        )
        agree = "yes" if report.is_dominant_cluster else "no"
        lines.append(f"{'In dominant cluster':<28} {agree}")
    lines.append("")

    if show_top and report.top_frames:
        lines.append("Top Frames (lowest composite score first)")
        lines.append("-" * 40)
        lines.append(f"{'Rank':<6} {'Frame':<10} {'Score':<12}")
        lines.append("-" * 40)
        for rf in report.top_frames:
            lines.append(f"{rf.rank:<6} {rf.frame:<10} {rf.score:<12.4f}")
        lines.append("-" * 40)
        lines.append("")

    for warning in report.warnings:
        lines.append(f"WARNING: {warning}")

    return "\n".join(lines)


def format_markdown(report: ScoringReport, show_top: bool = True) -> str:
    """Format a report as Markdown.

    Parameters
    ----------
    report : ScoringReport or ReconciliationReport
        Report to format
    show_top : bool, optional
        Include the top-ranked frames table. Default True.

    Returns
    -------
    str
        Markdown string
    """
    digits = report.round_digits
    lines = [
        f"# Frame Ranking: {report.name}",
        "",
        f"**Analysis:** {report.get_analysis_type()}  ",
        f"**Series:** {', '.join(report.series_names)}  ",
        f"**Combination:** {report.combination}  ",
        f"**Frames analyzed:** {report.n_frames}",
        "",
        "| Metric | Value |",
        "|--------|-------|",
        f"| Best frame | {report.best_frame} |",
        f"| Composite score | {report.composite_score:.4f} |",
        f"| DMCS | {report.dmcs_rounded:.{digits}f} |",
    ]

    if isinstance(report, ReconciliationReport):
        cluster = "none" if report.cluster_id is None else str(report.cluster_id)
        lines.extend(
            [
                f"| Best frame cluster | {cluster} |",
                f"| Dominant cluster | {report.dominant_cluster_id} |",
                f"| Dominant population | {report.dominant_population} |",
                f"| Dominant representative | {report.dominant_representative} |",
                f"| In dominant cluster | {'yes' if report.is_dominant_cluster else 'no'} |",
            ]
        )

    if show_top and report.top_frames:
        lines.extend(
            ["", "## Top Frames", "", "| Rank | Frame | Score |", "|------|-------|-------|"]
        )
        for rf in report.top_frames:
            lines.append(f"| {rf.rank} | {rf.frame} | {rf.score:.4f} |")

    if report.warnings:
        lines.extend(["", "## Warnings", ""])
        lines.extend(f"- {w}" for w in report.warnings)

    lines.append("")
    return "\n".join(lines)


def report_to_json(report: ScoringReport, indent: int = 2) -> str:
    """Serialize a report to JSON."""
    return report.model_dump_json(indent=indent)


def format_report(report: ScoringReport, format: str = "table", show_top: bool = True) -> str:
    """Format a report in the specified format.

    Parameters
    ----------
    report : ScoringReport or ReconciliationReport
        Report to format
    format : str
        Output format: "table", "markdown", or "json"
    show_top : bool, optional
        Include the top-ranked frames. Default True.

    Returns
    -------
    str
        Formatted output string

    Raises
    ------
    ValueError
        If format is not recognized
    """
    if format == "table":
        return format_console_table(report, show_top)
    elif format == "markdown":
        return format_markdown(report, show_top)
    elif format == "json":
        return report_to_json(report)
    else:
        raise ValueError(f"Unknown format: {format}. Use 'table', 'markdown', or 'json'.")
