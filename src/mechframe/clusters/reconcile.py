"""Reconcile the best-scoring frame with structural clusters.

The distance-based ranking and the external clustering pick representative
conformations independently. The reconciler reports which cluster holds the
best-scoring frame and whether that cluster is the most populous one.
Agreement increases confidence that the selected frame is a catalytically
competent conformation the system actually visits, rather than a rare
excursion.
"""

from __future__ import annotations

import logging
from typing import Sequence

from mechframe.clusters.summary import ClusterTable
from mechframe.exceptions import UnmatchedFrame
from mechframe.results.reports import ReconciliationReport, ScoringReport

LOGGER = logging.getLogger(__name__)


class RepresentativeReconciler:
    """Cross-reference the best-scoring frame with cluster membership.

    Parameters
    ----------
    clusters : ClusterTable
        Validated clustering summary

    Examples
    --------
    >>> reconciler = RepresentativeReconciler(clusters)
    >>> report = reconciler.reconcile(scoring_report, analyzed_frames=table.frames)
    >>> report.is_dominant_cluster
    True
    """

    def __init__(self, clusters: ClusterTable) -> None:
        self.clusters = clusters

    def reconcile(
        self,
        scoring: ScoringReport,
        analyzed_frames: Sequence[int] | None = None,
    ) -> ReconciliationReport:
        """Emit the reconciliation report.

        Parameters
        ----------
        scoring : ScoringReport
            Best frame, composite score and DMCS of the run
        analyzed_frames : sequence of int, optional
            Frames of the aligned table. Frames not covered by any cluster
            are counted and reported as a warning.

        Returns
        -------
        ReconciliationReport
            Scoring report extended with cluster information. An unassigned
            best frame is reported through ``cluster_id=None`` and a warning,
            not raised.
        """
        warnings = list(scoring.warnings) + self.clusters.warnings
        owner = self.clusters.cluster_of(scoring.best_frame)
        dominant = self.clusters.dominant()

        if owner is None:
            msg = (
                f"{UnmatchedFrame.__name__}: best frame {scoring.best_frame} "
                "is not a member of any cluster"
            )
            LOGGER.warning(msg)
            warnings.append(msg)

        n_uncovered = 0
        if analyzed_frames is not None:
            n_uncovered = len(self.clusters.uncovered(analyzed_frames))
            if n_uncovered:
                msg = f"{n_uncovered} analyzed frame(s) belong to no cluster"
                LOGGER.warning(msg)
                warnings.append(msg)

        is_dominant = owner is not None and owner.cluster_id == dominant.cluster_id
        LOGGER.info(
            f"Best frame {scoring.best_frame}: cluster "
            f"{owner.cluster_id if owner else 'none'}, dominant cluster "
            f"{dominant.cluster_id} (population {dominant.population}); "
            f"agreement={is_dominant}"
        )

        data = scoring.model_dump(exclude={"warnings"})
        return ReconciliationReport(
            **data,
            warnings=warnings,
            cluster_id=owner.cluster_id if owner else None,
            cluster_population=owner.population if owner else None,
            cluster_representative=owner.representative if owner else None,
            is_dominant_cluster=is_dominant,
            is_cluster_representative=(
                owner is not None and owner.representative == scoring.best_frame
            ),
            dominant_cluster_id=dominant.cluster_id,
            dominant_representative=dominant.representative,
            dominant_population=dominant.population,
            n_clusters=len(self.clusters),
            n_uncovered_frames=n_uncovered,
        )
