"""Composite scoring and the Dynamic Mechanistic Compatibility Score (DMCS).

Each frame gets a composite score by combining its per-criterion measurements
(by default an unweighted sum of distances, so smaller is better). The scores
are then min-max normalized over the analyzed frames and averaged:

    normalized_i = (s_i - min(s)) / (max(s) - min(s))
    DMCS = mean(normalized)

DMCS lies in [0, 1]. It is a run-local, relative measure: low values mean most
frames sit close to the best composite score observed in the same run.

Combination policies are pluggable. Register a new one with
:meth:`CombinationPolicyRegistry.register`:

>>> @CombinationPolicyRegistry.register("rms")
... class RMSPolicy(CombinationPolicy):
...     def combine(self, table):
...         return np.sqrt((table.values ** 2).mean(axis=1))
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Mapping, Type

import numpy as np
from numpy.typing import NDArray

from mechframe.constants import DEFAULT_COMBINATION, DEFAULT_ROUND_DIGITS
from mechframe.core.frame_table import FrameTable
from mechframe.exceptions import DegenerateScoreRange

LOGGER = logging.getLogger(__name__)


# ============================================================================
# Combination policies
# ============================================================================


class CombinationPolicy(ABC):
    """Combines a frame's per-series values into one composite score.

    Parameters
    ----------
    weights : mapping of str to float, optional
        Per-series weights. Series not listed get weight 1.0.
    """

    name: ClassVar[str] = "base"

    def __init__(self, weights: Mapping[str, float] | None = None) -> None:
        self.weights = dict(weights or {})
        for name, w in self.weights.items():
            if not math.isfinite(w) or w < 0:
                raise ValueError(f"Weight for '{name}' must be finite and >= 0, got {w}")

    def weight_vector(self, table: FrameTable) -> NDArray[np.float64]:
        """Weights in the table's series order."""
        unknown = set(self.weights) - set(table.series_names)
        if unknown:
            raise ValueError(
                f"Weights given for unknown series {sorted(unknown)}. "
                f"Available: {list(table.series_names)}"
            )
        return np.array([self.weights.get(n, 1.0) for n in table.series_names], dtype=np.float64)

    @abstractmethod
    def combine(self, table: FrameTable) -> NDArray[np.float64]:
        """Return one composite score per table row."""
        pass

    def describe(self) -> str:
        if not self.weights:
            return self.name
        weights = ", ".join(f"{k}={v:g}" for k, v in self.weights.items())
        return f"{self.name} ({weights})"


class CombinationPolicyRegistry:
    """Registry of combination policies by name."""

    _registry: ClassVar[dict[str, Type[CombinationPolicy]]] = {}

    @classmethod
    def register(
        cls, name: str
    ) -> Callable[[Type[CombinationPolicy]], Type[CombinationPolicy]]:
        """Decorator registering a policy class under ``name``."""

        def decorator(policy_cls: Type[CombinationPolicy]) -> Type[CombinationPolicy]:
            if name in cls._registry:
                raise ValueError(f"Combination policy '{name}' is already registered")
            policy_cls.name = name
            cls._registry[name] = policy_cls
            return policy_cls

        return decorator

    @classmethod
    def create(cls, name: str, **kwargs: Any) -> CombinationPolicy:
        """Instantiate the policy registered under ``name``."""
        if name not in cls._registry:
            raise ValueError(
                f"Unknown combination policy '{name}'. Available: {cls.list_available()}"
            )
        return cls._registry[name](**kwargs)

    @classmethod
    def list_available(cls) -> list[str]:
        return sorted(cls._registry)


@CombinationPolicyRegistry.register("sum")
class WeightedSumPolicy(CombinationPolicy):
    """Weighted sum of the per-series values (plain sum with default weights)."""

    def combine(self, table: FrameTable) -> NDArray[np.float64]:
        return table.values @ self.weight_vector(table)


@CombinationPolicyRegistry.register("max")
class WeightedMaxPolicy(CombinationPolicy):
    """Largest weighted value: a frame is only as good as its worst criterion."""

    def combine(self, table: FrameTable) -> NDArray[np.float64]:
        return (table.values * self.weight_vector(table)).max(axis=1)


# ============================================================================
# Scoring
# ============================================================================


@dataclass(frozen=True, eq=False)
class ScoreResult:
    """Per-frame scores and the DMCS scalar for one table.

    Attributes
    ----------
    frames : NDArray[np.int64]
        Frame indices, aligned with the score arrays
    composite : NDArray[np.float64]
        Composite score per frame
    normalized : NDArray[np.float64]
        Min-max normalized composite score per frame, in [0, 1]
    dmcs : float
        Mean of ``normalized``
    policy : str
        Description of the combination policy used
    """

    frames: NDArray[np.int64]
    composite: NDArray[np.float64]
    normalized: NDArray[np.float64]
    dmcs: float
    policy: str = DEFAULT_COMBINATION

    def __post_init__(self) -> None:
        for attr in ("frames", "composite", "normalized"):
            arr = np.array(getattr(self, attr))
            arr.setflags(write=False)
            object.__setattr__(self, attr, arr)

    @property
    def n_frames(self) -> int:
        return len(self.frames)

    def rounded_dmcs(self, digits: int = DEFAULT_ROUND_DIGITS) -> float:
        """DMCS rounded for display."""
        return round(self.dmcs, digits)


def normalize_scores(scores: NDArray[np.float64]) -> NDArray[np.float64]:
    """Min-max normalize scores to [0, 1].

    Raises
    ------
    DegenerateScoreRange
        If fewer than 2 distinct values are present
    ValueError
        If the score range is not finite (e.g. the combination overflowed)
    """
    scores = np.asarray(scores, dtype=np.float64)
    if len(scores) == 0:
        raise ValueError("Cannot normalize an empty score sequence")
    lo = float(scores.min())
    hi = float(scores.max())
    if hi == lo:
        raise DegenerateScoreRange(lo, len(scores))
    if not np.isfinite(hi - lo):
        raise ValueError(f"Composite score range [{lo:g}, {hi:g}] is not finite; cannot normalize")
    return (scores - lo) / (hi - lo)


class CompositeScorer:
    """Compute composite scores, normalized compatibility values and DMCS.

    Parameters
    ----------
    policy : CombinationPolicy or str, optional
        Combination policy instance or registered name. Default "sum".
    weights : mapping of str to float, optional
        Per-series weights, used when ``policy`` is given by name

    Examples
    --------
    >>> scorer = CompositeScorer()
    >>> result = scorer.score(table)
    >>> print(f"DMCS: {result.rounded_dmcs():.3f}")
    """

    def __init__(
        self,
        policy: CombinationPolicy | str = DEFAULT_COMBINATION,
        weights: Mapping[str, float] | None = None,
    ) -> None:
        if isinstance(policy, str):
            policy = CombinationPolicyRegistry.create(policy, weights=weights)
        elif weights:
            raise ValueError("Pass weights to the policy instance, not to CompositeScorer")
        self.policy = policy

    def composite_scores(self, table: FrameTable) -> NDArray[np.float64]:
        """Composite score per table row."""
        scores = np.asarray(self.policy.combine(table), dtype=np.float64)
        if scores.shape != (table.n_frames,):
            raise ValueError(
                f"Policy '{self.policy.name}' returned shape {scores.shape}, "
                f"expected ({table.n_frames},)"
            )
        return scores

    def score(self, table: FrameTable) -> ScoreResult:
        """Score every frame of ``table``.

        Raises
        ------
        DegenerateScoreRange
            If all composite scores are equal
        """
        composite = self.composite_scores(table)
        normalized = normalize_scores(composite)
        dmcs = float(normalized.mean())

        LOGGER.info(
            f"Scored {table.n_frames} frames with policy {self.policy.describe()}: "
            f"composite range [{composite.min():.3f}, {composite.max():.3f}], DMCS={dmcs:.3f}"
        )
        return ScoreResult(
            frames=table.frames,
            composite=composite,
            normalized=normalized,
            dmcs=dmcs,
            policy=self.policy.describe(),
        )
