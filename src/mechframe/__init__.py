"""
MechFrame: mechanistically informed frame ranking for MD trajectories.

Combines per-frame catalytic distance series into a composite score,
computes the Dynamic Mechanistic Compatibility Score (DMCS), selects the
frame best suited for downstream QM/MM work, and reconciles it with an
external structural clustering.

Example usage:
    >>> from mechframe.config import RankingConfig
    >>> config = RankingConfig.from_yaml("mechframe.yaml")

    >>> from mechframe import FrameRankingPipeline
    >>> report = FrameRankingPipeline(config).run()
    >>> print(report.summary())

Key modules:
    - core: series loading, frame alignment, scoring and selection
    - clusters: clustering summary parsing and reconciliation
    - config: YAML run configuration
    - results: JSON-serializable reports
"""

__version__ = "0.1.0"
__author__ = "MechFrame developers"

__all__ = [
    # Version info
    "__version__",
    "__author__",
    # Configuration
    "RankingConfig",
    # Pipeline
    "FrameRankingPipeline",
    # Building blocks
    "FrameTable",
    "CompositeScorer",
    "ClusterSummaryReader",
    "RepresentativeReconciler",
]


def __getattr__(name: str):
    """
    Lazy import submodules only when accessed.

    Keeps ``import mechframe`` (and ``mechframe --version``) from pulling
    in numpy and pydantic until a class is actually used.
    """
    if name == "RankingConfig":
        from mechframe.config.schema import RankingConfig

        return RankingConfig

    if name == "FrameRankingPipeline":
        from mechframe.pipeline import FrameRankingPipeline

        return FrameRankingPipeline

    if name == "FrameTable":
        from mechframe.core.frame_table import FrameTable

        return FrameTable

    if name == "CompositeScorer":
        from mechframe.core.scoring import CompositeScorer

        return CompositeScorer

    if name == "ClusterSummaryReader":
        from mechframe.clusters.summary import ClusterSummaryReader

        return ClusterSummaryReader

    if name == "RepresentativeReconciler":
        from mechframe.clusters.reconcile import RepresentativeReconciler

        return RepresentativeReconciler

    raise AttributeError(f"module 'mechframe' has no attribute '{name}'")


def __dir__():
    """List available attributes for tab completion."""
    return __all__
