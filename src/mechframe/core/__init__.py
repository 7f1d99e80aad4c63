"""Core frame-ranking infrastructure.

This module provides the building blocks of a ranking run:
- Measurement series loading with strict row validation
- Frame-index alignment of several series into a FrameTable
- Composite scoring with pluggable combination policies and DMCS
- Deterministic best-frame selection and ranking
"""

from mechframe.core.series import (
    MeasurementSeries,
    SeriesLoader,
    load_series,
    parse_series_lines,
)
from mechframe.core.frame_table import FrameTable
from mechframe.core.scoring import (
    CombinationPolicy,
    CombinationPolicyRegistry,
    CompositeScorer,
    ScoreResult,
    WeightedMaxPolicy,
    WeightedSumPolicy,
    normalize_scores,
)
from mechframe.core.selection import (
    BestFrame,
    rank_frames,
    select_best_frame,
)

__all__ = [
    # Series loading
    "MeasurementSeries",
    "SeriesLoader",
    "load_series",
    "parse_series_lines",
    # Alignment
    "FrameTable",
    # Scoring
    "CombinationPolicy",
    "CombinationPolicyRegistry",
    "CompositeScorer",
    "ScoreResult",
    "WeightedMaxPolicy",
    "WeightedSumPolicy",
    "normalize_scores",
    # Selection
    "BestFrame",
    "rank_frames",
    "select_best_frame",
]
