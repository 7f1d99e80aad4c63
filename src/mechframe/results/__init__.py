"""Result models.

This module provides Pydantic models for serializing and storing ranking
results with metadata for reproducibility.

Classes
-------
BaseAnalysisResult
    Base class for all result types
ScoringReport
    Best frame and DMCS from the distance series
ReconciliationReport
    Scoring report cross-referenced with structural clusters
"""

from mechframe.results.base import (
    BaseAnalysisResult,
    get_mechframe_version,
)
from mechframe.results.reports import (
    RankedFrame,
    ReconciliationReport,
    ScoringReport,
)

__all__ = [
    "BaseAnalysisResult",
    "get_mechframe_version",
    "RankedFrame",
    "ScoringReport",
    "ReconciliationReport",
]
