"""
MechFrame Command Line Interface.

This module provides the main CLI entry point for MechFrame, using Click
for argument parsing and command organization.

Usage:
    mechframe --help
    mechframe init
    mechframe validate -f mechframe.yaml
    mechframe run -c mechframe.yaml
    mechframe score dist_lys_plp.dat dist_plp_uni.dat dist_plp_unl.dat
    mechframe reconcile dist_*.dat --summary cluster_summary.dat --assignments cluster.dat
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Dict, List, NoReturn, Optional, Tuple

import click
from pydantic import ValidationError

from mechframe import __version__
from mechframe.constants import DEFAULT_COMBINATION, DEFAULT_CONFIG_NAME, DEFAULT_TOP_N
from mechframe.exceptions import MechFrameError

# Errors reported as a one-line failure instead of a traceback
RUN_ERRORS = (MechFrameError, ValidationError, FileNotFoundError, ValueError)


def _fail(message: str) -> NoReturn:
    click.echo(click.style(message, fg="red"), err=True)
    sys.exit(1)


def _parse_weights(ctx, param, values: Tuple[str, ...]) -> Dict[str, float]:
    """Parse repeated ``NAME=W`` options into a weight mapping."""
    weights: Dict[str, float] = {}
    for item in values:
        name, sep, raw = item.partition("=")
        if not sep or not name:
            raise click.BadParameter(f"expected NAME=WEIGHT, got '{item}'")
        try:
            weights[name] = float(raw)
        except ValueError:
            raise click.BadParameter(f"weight for '{name}' is not a number: '{raw}'") from None
    return weights


def _series_entries(series: Tuple[str, ...], labels: Tuple[str, ...]) -> List[Dict[str, Any]]:
    if labels and len(labels) != len(series):
        raise click.BadParameter(
            f"got {len(labels)} label(s) for {len(series)} series file(s)",
            param_hint="--label",
        )
    entries = []
    for i, path in enumerate(series):
        entry: Dict[str, Any] = {"path": path}
        if labels:
            entry["label"] = labels[i]
        entries.append(entry)
    return entries


def _run_from_dict(data: Dict[str, Any], output_format: str) -> None:
    """Validate an ad-hoc configuration, run it and print the report."""
    from mechframe.config.loader import load_config_dict
    from mechframe.formatters import format_report
    from mechframe.pipeline import FrameRankingPipeline

    try:
        config = load_config_dict(data)
        report = FrameRankingPipeline(config).run()
    except RUN_ERRORS as e:
        _fail(f"Error: {e}")

    click.echo(format_report(report, format=output_format))


def _output_section(
    merged_out: Optional[str], report_out: Optional[str], top_n: int
) -> Dict[str, Any]:
    output: Dict[str, Any] = {"top_n": top_n}
    if merged_out:
        output["merged_table"] = merged_out
    if report_out:
        output["report"] = report_out
    return output


def series_options(f):
    """Options shared by the argument-driven ``score`` and ``reconcile`` commands."""
    decorators = [
        click.argument("series", nargs=-1, required=True, type=click.Path(exists=True)),
        click.option(
            "-l",
            "--label",
            "labels",
            multiple=True,
            help="Series label, once per file in order (default: file header name)",
        ),
        click.option(
            "-w",
            "--weight",
            "weights",
            multiple=True,
            callback=_parse_weights,
            help="Series weight as NAME=W (repeatable; unlisted series weigh 1.0)",
        ),
        click.option(
            "--combination",
            type=click.Choice(["sum", "max"]),
            default=DEFAULT_COMBINATION,
            show_default=True,
            help="How per-series distances combine into a composite score",
        ),
        click.option(
            "--merged-out",
            type=click.Path(),
            default=None,
            help="Write the aligned Frame/series table to this file",
        ),
        click.option(
            "--report-out",
            type=click.Path(),
            default=None,
            help="Write the JSON report to this file",
        ),
        click.option(
            "--top-n",
            type=click.IntRange(min=1),
            default=DEFAULT_TOP_N,
            show_default=True,
            help="Number of top-ranked frames to list",
        ),
        click.option(
            "--format",
            "output_format",
            type=click.Choice(["table", "markdown", "json"]),
            default="table",
            show_default=True,
            help="Console output format",
        ),
    ]
    for decorator in reversed(decorators):
        f = decorator(f)
    return f


@click.group()
@click.version_option(version=__version__, prog_name="mechframe")
@click.option(
    "-q", "--quiet", is_flag=True, help="Suppress INFO messages, show warnings/errors only"
)
@click.option("--debug", is_flag=True, help="Enable DEBUG logging for troubleshooting")
def cli(quiet: bool, debug: bool) -> None:
    """MechFrame: rank MD frames by catalytic geometry.

    Combines per-frame distance series into a composite score, computes
    the Dynamic Mechanistic Compatibility Score (DMCS), and reconciles the
    best frame with an external clustering.
    """
    from mechframe.logging_utils import setup_logging

    setup_logging(quiet=quiet, debug=debug)


# =============================================================================
# Init Command
# =============================================================================


@cli.command()
@click.option(
    "-n",
    "--name",
    default="mechframe",
    show_default=True,
    help="Run name written into the template",
)
@click.option(
    "-o",
    "--output",
    default=DEFAULT_CONFIG_NAME,
    show_default=True,
    type=click.Path(),
    help="Where to write the configuration template",
)
def init(name: str, output: str) -> None:
    """Write a template run configuration.

    \b
    Example:
        mechframe init --name plp_ligands

    Refuses to overwrite an existing file.
    """
    from mechframe.config.schema import generate_config_template

    dest = Path(output)
    if dest.exists():
        click.echo(
            click.style(f"Error: {dest} already exists.", fg="red"),
            err=True,
        )
        click.echo("Choose a different --output or remove the existing file.")
        sys.exit(1)

    dest.write_text(generate_config_template(name))

    click.echo(click.style(f"Created {dest}", fg="green"))
    click.echo()
    click.echo("Next steps:")
    click.echo(f"  1. Edit {dest} (series files, clustering output, outputs)")
    click.echo(f"  2. Validate: mechframe validate -f {dest}")
    click.echo(f"  3. Run:      mechframe run -c {dest}")


# =============================================================================
# Validate Command
# =============================================================================


@cli.command()
@click.option(
    "-f",
    "--file",
    "config_file",
    default=DEFAULT_CONFIG_NAME,
    show_default=True,
    type=click.Path(),
    help="Configuration file to validate",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    show_default=True,
    help="Output format",
)
def validate(config_file: str, output_format: str) -> None:
    """Validate a configuration file.

    Checks that the configuration is valid and all referenced
    files exist.
    """
    from mechframe.config.loader import load_config

    try:
        config = load_config(config_file)
    except RUN_ERRORS as e:
        if output_format == "json":
            click.echo(json.dumps({"valid": False, "issues": [str(e)]}, indent=2))
            sys.exit(1)
        _fail(f"Validation failed: {e}")

    issues = config.validate_config()

    if output_format == "json":
        payload = {
            "valid": not issues,
            "name": config.name,
            "series": [str(s.path) for s in config.series],
            "combination": config.scoring.combination,
            "clusters": config.clusters is not None,
            "issues": issues,
        }
        click.echo(json.dumps(payload, indent=2))
        if issues:
            sys.exit(1)
        return

    if issues:
        click.echo(click.style("Configuration has issues:", fg="red"), err=True)
        for issue in issues:
            click.echo(f"  - {issue}", err=True)
        sys.exit(1)

    click.echo(click.style("Configuration is valid!", fg="green"))
    click.echo()
    click.echo("Summary:")
    click.echo(f"  Name: {config.name}")
    click.echo(f"  Series: {len(config.series)}")
    for s in config.series:
        click.echo(f"    {s.label or '(from header)'}: {s.path}")
    click.echo(f"  Combination: {config.scoring.combination}")
    if config.clusters is not None:
        click.echo(f"  Cluster summary: {config.clusters.summary}")
        if config.clusters.assignments is not None:
            click.echo(f"  Cluster assignments: {config.clusters.assignments}")
    else:
        click.echo("  Clusters: None (score only)")


# =============================================================================
# Run Command
# =============================================================================


@cli.command()
@click.option(
    "-c",
    "--config",
    "config_file",
    default=DEFAULT_CONFIG_NAME,
    show_default=True,
    type=click.Path(),
    help="Path to YAML configuration file",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "markdown", "json"]),
    default="table",
    show_default=True,
    help="Console output format",
)
def run(config_file: str, output_format: str) -> None:
    """Run a frame ranking from a configuration file.

    Loads and aligns the series, scores every common frame, reports DMCS
    and the best frame, and reconciles it with the clusters when a
    ``clusters`` section is configured.
    """
    from mechframe.config.loader import load_config
    from mechframe.formatters import format_report
    from mechframe.pipeline import FrameRankingPipeline

    try:
        config = load_config(config_file)
        report = FrameRankingPipeline(config).run()
    except RUN_ERRORS as e:
        _fail(f"Error: {e}")

    click.echo(format_report(report, format=output_format))


# =============================================================================
# Argument-driven Commands
# =============================================================================


@cli.command()
@series_options
def score(
    series: Tuple[str, ...],
    labels: Tuple[str, ...],
    weights: Dict[str, float],
    combination: str,
    merged_out: Optional[str],
    report_out: Optional[str],
    top_n: int,
    output_format: str,
) -> None:
    """Score frames from distance series files, without clustering.

    \b
    Example:
        mechframe score dist_lys_plp.dat dist_plp_uni.dat dist_plp_unl.dat \\
            --merged-out plp_all_dist.dat
    """
    data = {
        "series": _series_entries(series, labels),
        "scoring": {"combination": combination, "weights": weights},
        "output": _output_section(merged_out, report_out, top_n),
    }
    _run_from_dict(data, output_format)


@cli.command()
@series_options
@click.option(
    "--summary",
    required=True,
    type=click.Path(exists=True),
    help="Clustering summary file (one row per cluster)",
)
@click.option(
    "--assignments",
    type=click.Path(exists=True),
    default=None,
    help="Per-frame cluster assignment file (required unless the summary lists members)",
)
def reconcile(
    series: Tuple[str, ...],
    labels: Tuple[str, ...],
    weights: Dict[str, float],
    combination: str,
    merged_out: Optional[str],
    report_out: Optional[str],
    top_n: int,
    output_format: str,
    summary: str,
    assignments: Optional[str],
) -> None:
    """Score frames and reconcile the best one with a clustering.

    \b
    Example:
        mechframe reconcile dist_*.dat \\
            --summary cluster_summary.dat --assignments cluster.dat
    """
    clusters: Dict[str, Any] = {"summary": summary}
    if assignments:
        clusters["assignments"] = assignments

    data = {
        "series": _series_entries(series, labels),
        "scoring": {"combination": combination, "weights": weights},
        "clusters": clusters,
        "output": _output_section(merged_out, report_out, top_n),
    }
    _run_from_dict(data, output_format)


def main() -> int:
    """Main entry point."""
    try:
        cli()
        return 0
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else 1


if __name__ == "__main__":
    sys.exit(main())
