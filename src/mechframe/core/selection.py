"""Best-frame selection.

Smaller composite scores are better (shorter catalytic distances). Exact ties
at the minimum are broken by the lowest frame index so that the selection does
not depend on the order in which frames happen to be stored.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike


@dataclass(frozen=True)
class BestFrame:
    """A frame together with its composite score."""

    frame: int
    score: float

    def __repr__(self) -> str:
        return f"BestFrame(frame={self.frame}, score={self.score:.4f})"


def _as_arrays(frames: ArrayLike, scores: ArrayLike) -> tuple[np.ndarray, np.ndarray]:
    frames_arr = np.asarray(frames, dtype=np.int64)
    scores_arr = np.asarray(scores, dtype=np.float64)
    if frames_arr.ndim != 1 or frames_arr.shape != scores_arr.shape:
        raise ValueError(
            f"frames {frames_arr.shape} and scores {scores_arr.shape} must be 1D of equal length"
        )
    if len(frames_arr) == 0:
        raise ValueError("Cannot select from an empty set of frames")
    return frames_arr, scores_arr


def select_best_frame(frames: ArrayLike, scores: ArrayLike) -> BestFrame:
    """Return the frame with the minimum composite score.

    Parameters
    ----------
    frames : array-like of int
        Frame indices
    scores : array-like of float
        Composite score per frame, aligned with ``frames``

    Returns
    -------
    BestFrame
        Minimum-score frame; the lowest frame index among exact ties

    Examples
    --------
    >>> select_best_frame([1, 2, 3], [8.0, 6.0, 6.0])
    BestFrame(frame=2, score=6.0000)
    """
    frames_arr, scores_arr = _as_arrays(frames, scores)
    best_score = scores_arr.min()
    tied = frames_arr[scores_arr == best_score]
    return BestFrame(frame=int(tied.min()), score=float(best_score))


def rank_frames(
    frames: ArrayLike,
    scores: ArrayLike,
    top_n: int | None = None,
) -> list[BestFrame]:
    """Rank frames by ascending score, then ascending frame index.

    Parameters
    ----------
    frames : array-like of int
        Frame indices
    scores : array-like of float
        Composite score per frame
    top_n : int, optional
        Keep only the first ``top_n`` entries. Default keeps all.

    Returns
    -------
    list[BestFrame]
        Ranked frames; the first entry equals :func:`select_best_frame`
    """
    frames_arr, scores_arr = _as_arrays(frames, scores)
    if top_n is not None and top_n < 1:
        raise ValueError(f"top_n must be >= 1, got {top_n}")

    # lexsort uses the last key as the primary key
    order = np.lexsort((frames_arr, scores_arr))
    if top_n is not None:
        order = order[:top_n]
    return [BestFrame(frame=int(frames_arr[i]), score=float(scores_arr[i])) for i in order]
