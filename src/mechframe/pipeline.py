"""End-to-end frame ranking run.

The pipeline runs the stages in a single pass:

1. Load the measurement series and align them into a FrameTable
2. Read and validate the clustering summary (if configured)
3. Score frames and compute DMCS
4. Select the best frame and build the report
5. Reconcile the best frame with the clusters (if configured)
6. Write the merged table and JSON report

Outputs are written only after every stage has succeeded, so a run on
structurally invalid input leaves no partial files behind.
"""

from __future__ import annotations

import logging
from typing import Sequence

from mechframe.clusters.reconcile import RepresentativeReconciler
from mechframe.clusters.summary import ClusterSummaryReader, ClusterTable
from mechframe.config.schema import RankingConfig
from mechframe.constants import DEFAULT_ROUND_DIGITS, DEFAULT_TOP_N
from mechframe.core.frame_table import FrameTable
from mechframe.core.scoring import CompositeScorer, ScoreResult
from mechframe.core.selection import rank_frames, select_best_frame
from mechframe.core.series import SeriesLoader
from mechframe.results.base import get_mechframe_version
from mechframe.results.reports import RankedFrame, ReconciliationReport, ScoringReport

LOGGER = logging.getLogger(__name__)


def dropped_frame_warnings(table: FrameTable) -> list[str]:
    """Warning messages for series that lost frames during alignment."""
    return [
        f"Series '{name}' had {count} frame(s) missing from other series; dropped"
        for name, count in table.dropped_frames.items()
        if count
    ]


def build_scoring_report(
    table: FrameTable,
    scores: ScoreResult,
    name: str = "mechframe",
    source_files: Sequence[str] = (),
    top_n: int = DEFAULT_TOP_N,
    round_digits: int = DEFAULT_ROUND_DIGITS,
    config_hash: str = "unknown",
) -> ScoringReport:
    """Select the best frame and assemble a :class:`ScoringReport`.

    Parameters
    ----------
    table : FrameTable
        Aligned measurements
    scores : ScoreResult
        Scores computed from ``table``
    name : str, optional
        Run name
    source_files : sequence of str, optional
        Series input files, recorded for provenance
    top_n : int, optional
        Number of ranked frames to include
    round_digits : int, optional
        DMCS display digits
    config_hash : str, optional
        Hash of the run configuration

    Returns
    -------
    ScoringReport
        Report for the best frame
    """
    best = select_best_frame(scores.frames, scores.composite)
    ranked = rank_frames(scores.frames, scores.composite, top_n=top_n)

    LOGGER.info(f"Best frame: {best.frame} (composite score {best.score:.4f})")

    return ScoringReport(
        name=name,
        config_hash=config_hash,
        mechframe_version=get_mechframe_version(),
        series_names=list(table.series_names),
        source_files=list(source_files),
        combination=scores.policy,
        n_frames=table.n_frames,
        dropped_frames=table.dropped_frames,
        best_frame=best.frame,
        composite_score=best.score,
        dmcs=scores.dmcs,
        round_digits=round_digits,
        top_frames=[
            RankedFrame(rank=i, frame=rf.frame, score=rf.score) for i, rf in enumerate(ranked, 1)
        ],
        warnings=dropped_frame_warnings(table),
    )


class FrameRankingPipeline:
    """Run a complete frame ranking from a :class:`RankingConfig`.

    Parameters
    ----------
    config : RankingConfig
        Run configuration

    Examples
    --------
    >>> config = RankingConfig.from_yaml("mechframe.yaml")
    >>> report = FrameRankingPipeline(config).run()
    >>> print(report.summary())
    """

    def __init__(self, config: RankingConfig) -> None:
        self.config = config
        self.scorer = CompositeScorer(
            config.scoring.combination, weights=config.scoring.weights
        )

    def load_table(self) -> FrameTable:
        """Load every configured series and align them."""
        loader = SeriesLoader(
            [s.path for s in self.config.series],
            names=[s.label for s in self.config.series],
        )
        return FrameTable.from_series(loader.load())

    def load_clusters(self) -> ClusterTable | None:
        """Read the configured clustering summary, if any."""
        if self.config.clusters is None:
            return None
        reader = ClusterSummaryReader(
            self.config.clusters.summary, assignments=self.config.clusters.assignments
        )
        return reader.read()

    def run(self, write_outputs: bool = True) -> ScoringReport | ReconciliationReport:
        """Execute the run.

        Parameters
        ----------
        write_outputs : bool, optional
            Write the merged table and report files configured in
            ``output``. Default True.

        Returns
        -------
        ScoringReport or ReconciliationReport
            ReconciliationReport when clusters are configured

        Raises
        ------
        MalformedSeries, NoCommonFrames, DegenerateScoreRange, InconsistentClusterSummary
            On structurally invalid input; nothing is written
        """
        out = self.config.output
        LOGGER.info(f"Starting frame ranking run '{self.config.name}'")

        table = self.load_table()
        clusters = self.load_clusters()
        scores = self.scorer.score(table)

        report: ScoringReport | ReconciliationReport = build_scoring_report(
            table,
            scores,
            name=self.config.name,
            source_files=[str(s.path) for s in self.config.series],
            top_n=out.top_n,
            round_digits=out.round_digits,
            config_hash=self.config.compute_hash(),
        )
        if clusters is not None:
            report = RepresentativeReconciler(clusters).reconcile(
                report, analyzed_frames=table.frames
            )

        if write_outputs:
            if out.merged_table is not None:
                table.write(out.merged_table, float_format=out.float_format)
            if out.report is not None:
                report.save(out.report)
                LOGGER.info(f"Saved report to {out.report}")

        LOGGER.info(
            f"Run '{self.config.name}' complete: best frame {report.best_frame}, "
            f"DMCS {report.dmcs_rounded}"
        )
        return report
