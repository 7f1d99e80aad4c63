"""Structural cluster summaries and reconciliation with the frame ranking."""

from mechframe.clusters.summary import (
    COLUMN_ALIASES,
    ClusterRecord,
    ClusterSummaryReader,
    ClusterTable,
    parse_frame_list,
    read_cluster_assignments,
)
from mechframe.clusters.reconcile import RepresentativeReconciler

__all__ = [
    # summary.py
    "COLUMN_ALIASES",
    "ClusterRecord",
    "ClusterSummaryReader",
    "ClusterTable",
    "parse_frame_list",
    "read_cluster_assignments",
    # reconcile.py
    "RepresentativeReconciler",
]
