"""Frame ranking and cluster reconciliation result models.

This module defines Pydantic models for the terminal artifacts of a run:
- ScoringReport: best frame and DMCS from the distance series alone
- ReconciliationReport: ScoringReport plus the cluster cross-reference

The key interpretation signal is ``is_dominant_cluster``: when the frame
ranked best by the distance criteria also belongs to the most populous
structural cluster, the score-based and population-based views agree on the
selected conformation.
"""

from __future__ import annotations

from typing import ClassVar

from pydantic import BaseModel, Field

from mechframe.constants import DEFAULT_ROUND_DIGITS
from mechframe.results.base import BaseAnalysisResult


class RankedFrame(BaseModel):
    """One entry of the frame ranking."""

    rank: int = Field(..., description="1-based rank (1 = lowest composite score)")
    frame: int = Field(..., description="Frame index")
    score: float = Field(..., description="Composite score")

    model_config = {"frozen": True}


class ScoringReport(BaseAnalysisResult):
    """Best frame and DMCS for one set of measurement series.

    Attributes
    ----------
    series_names : list[str]
        Measurement series, in table column order
    source_files : list[str]
        Files the series were read from
    combination : str
        Combination policy used for composite scores
    n_frames : int
        Frames in the aligned table
    dropped_frames : dict[str, int]
        Frames of each series not common to all series
    best_frame : int
        Frame with the lowest composite score (lowest index on ties)
    composite_score : float
        Composite score of ``best_frame``
    dmcs : float
        Dynamic Mechanistic Compatibility Score (unrounded)
    round_digits : int
        Decimal digits used when displaying DMCS
    top_frames : list[RankedFrame]
        Best-ranked frames, best first
    warnings : list[str]
        Non-fatal conditions met during the run
    """

    analysis_type: ClassVar[str] = "frame_scoring"

    series_names: list[str] = Field(..., description="Series in column order")
    source_files: list[str] = Field(default_factory=list, description="Series input files")
    combination: str = Field(default="sum", description="Composite score combination policy")
    n_frames: int = Field(..., description="Frames in the aligned table")
    dropped_frames: dict[str, int] = Field(
        default_factory=dict, description="Dropped frames per series during alignment"
    )

    best_frame: int = Field(..., description="Frame with the minimum composite score")
    composite_score: float = Field(..., description="Composite score of the best frame")
    dmcs: float = Field(..., ge=0.0, le=1.0, description="Dynamic Mechanistic Compatibility Score")
    round_digits: int = Field(default=DEFAULT_ROUND_DIGITS, ge=0, description="DMCS display digits")
    top_frames: list[RankedFrame] = Field(default_factory=list, description="Top-ranked frames")

    warnings: list[str] = Field(default_factory=list, description="Non-fatal run warnings")

    @property
    def dmcs_rounded(self) -> float:
        """DMCS rounded to ``round_digits``."""
        return round(self.dmcs, self.round_digits)

    @property
    def n_series(self) -> int:
        return len(self.series_names)

    def _scoring_lines(self) -> list[str]:
        lines = [
            f"Series: {', '.join(self.series_names)}",
            f"Combination: {self.combination}",
            f"Frames analyzed: {self.n_frames}",
        ]
        dropped = {k: v for k, v in self.dropped_frames.items() if v}
        if dropped:
            lines.append(
                "Dropped during alignment: " + ", ".join(f"{k}={v}" for k, v in dropped.items())
            )
        lines.extend(
            [
                "",
                f"Best frame: {self.best_frame}",
                f"Composite score: {self.composite_score:.4f}",
                f"DMCS: {self.dmcs_rounded:.{self.round_digits}f}",
            ]
        )
        if self.top_frames:
            lines.extend(["", "Top frames:", "-" * 40])
            for rf in self.top_frames:
                lines.append(f"  {rf.rank:>3}. frame {rf.frame:<8} score {rf.score:.4f}")
        return lines

    def _warning_lines(self) -> list[str]:
        if not self.warnings:
            return []
        return ["", *(f"WARNING: {w}" for w in self.warnings)]

    def summary(self) -> str:
        """Return human-readable summary."""
        lines = [f"Frame Scoring: {self.name}", "=" * 60]
        lines.extend(self._scoring_lines())
        lines.extend(self._warning_lines())
        return "\n".join(lines)


class ReconciliationReport(ScoringReport):
    """Best frame and DMCS reconciled against structural clusters.

    Attributes
    ----------
    cluster_id : int | None
        Cluster containing the best frame (None if unassigned)
    cluster_population : int | None
        Population of that cluster
    cluster_representative : int | None
        Representative frame of that cluster
    is_dominant_cluster : bool
        True if the best frame's cluster is the most populous one
    is_cluster_representative : bool
        True if the best frame is its cluster's own representative
    dominant_cluster_id : int
        Most populous cluster (lowest id on ties)
    dominant_representative : int
        Representative frame of the dominant cluster
    dominant_population : int
        Population of the dominant cluster
    n_clusters : int
        Number of clusters in the summary
    n_uncovered_frames : int
        Analyzed frames that belong to no cluster
    """

    analysis_type: ClassVar[str] = "reconciliation"

    cluster_id: int | None = Field(default=None, description="Cluster of the best frame")
    cluster_population: int | None = Field(default=None, description="Its population")
    cluster_representative: int | None = Field(default=None, description="Its representative")
    is_dominant_cluster: bool = Field(
        ..., description="Best frame lies in the most populous cluster"
    )
    is_cluster_representative: bool = Field(
        default=False, description="Best frame is its cluster's representative"
    )

    dominant_cluster_id: int = Field(..., description="Most populous cluster")
    dominant_representative: int = Field(..., description="Representative of dominant cluster")
    dominant_population: int = Field(..., description="Population of dominant cluster")

    n_clusters: int = Field(..., description="Clusters in the summary")
    n_uncovered_frames: int = Field(default=0, description="Analyzed frames in no cluster")

    @property
    def is_unmatched(self) -> bool:
        """True if the best frame belongs to no cluster."""
        return self.cluster_id is None

    def summary(self) -> str:
        """Return human-readable summary."""
        lines = [f"Frame Ranking and Cluster Reconciliation: {self.name}", "=" * 60]
        lines.extend(self._scoring_lines())
        lines.extend(["", "Cluster reconciliation:", "-" * 40])

        if self.is_unmatched:
            lines.append(f"  Best frame {self.best_frame} belongs to no cluster")
        else:
            rep_note = " (is representative)" if self.is_cluster_representative else ""
            lines.append(
                f"  Best frame cluster: {self.cluster_id} "
                f"(population {self.cluster_population}, "
                f"representative {self.cluster_representative}){rep_note}"
            )
        lines.append(
            f"  Dominant cluster: {self.dominant_cluster_id} "
            f"(population {self.dominant_population}, "
            f"representative {self.dominant_representative})"
        )
        lines.append(f"  Clusters: {self.n_clusters}")
        verdict = "yes" if self.is_dominant_cluster else "no"
        lines.append(f"  Best frame in dominant cluster: {verdict}")

        lines.extend(self._warning_lines())
        return "\n".join(lines)
