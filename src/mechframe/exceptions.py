"""Exception and warning types raised by MechFrame.

Structural problems with the input (unparseable rows, empty alignments,
contradictory cluster summaries) are fatal and raised as subclasses of
:class:`MechFrameError`. Conditions that do not invalidate the result are
reported as warnings attached to the final report instead.
"""

from __future__ import annotations

from typing import Sequence


class MechFrameError(Exception):
    """Base class for fatal MechFrame errors."""

    pass


class MalformedSeries(MechFrameError):
    """Raised when a measurement series row cannot be parsed.

    Parameters
    ----------
    source : str
        File path or stream name the row came from
    line_number : int | None
        1-indexed line number of the offending row (None for file-level problems)
    reason : str
        What was wrong with the row
    """

    def __init__(self, source: str, line_number: int | None, reason: str) -> None:
        self.source = source
        self.line_number = line_number
        self.reason = reason
        if line_number is None:
            location = source
        else:
            location = f"{source}, line {line_number}"
        super().__init__(f"Malformed series ({location}): {reason}")


class NoCommonFrames(MechFrameError):
    """Raised when the loaded series share no frame index."""

    def __init__(self, series_names: Sequence[str]) -> None:
        self.series_names = list(series_names)
        super().__init__(
            "No frame index is common to all series: " + ", ".join(self.series_names)
        )


class DegenerateScoreRange(MechFrameError):
    """Raised when composite scores cannot be min-max normalized."""

    def __init__(self, value: float, n_frames: int) -> None:
        self.value = value
        self.n_frames = n_frames
        super().__init__(
            f"All {n_frames} composite score(s) equal {value:g}; "
            "min-max normalization needs at least 2 distinct values"
        )


class InconsistentClusterSummary(MechFrameError):
    """Raised when a clustering summary contradicts itself."""

    def __init__(
        self,
        message: str,
        cluster_id: int | None = None,
        source: str | None = None,
    ) -> None:
        self.cluster_id = cluster_id
        self.source = source
        prefix = "Inconsistent cluster summary"
        if source is not None:
            prefix += f" ({source})"
        if cluster_id is not None:
            prefix += f", cluster {cluster_id}"
        super().__init__(f"{prefix}: {message}")


class UnmatchedFrame(UserWarning):
    """Best-scoring frame is not a member of any cluster.

    Never raised. The message is recorded in the report warnings.
    """

    pass
