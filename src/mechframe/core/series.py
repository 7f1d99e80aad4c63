"""Measurement series loading.

A measurement series maps frame indices to one scalar per frame, e.g. the
distance between a catalytic lysine and the PLP cofactor written by
``cpptraj distance ... out dist_lys_plp.dat``. The expected layout is a
single header line followed by ``<frame_index> <value>`` rows::

    #Frame      Lys_PLP
           1       3.2145
           2       3.0871

Parsing is strict: any row that does not hold exactly one integer and one
float fails the whole load with :class:`~mechframe.exceptions.MalformedSeries`
naming the file and line, so that a truncated or corrupted upstream output is
never silently absorbed into the ranking.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence, TextIO, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray

from mechframe.exceptions import MalformedSeries

LOGGER = logging.getLogger(__name__)

SeriesSource = Union[str, Path, TextIO]


@dataclass(frozen=True, eq=False)
class MeasurementSeries:
    """One proximity criterion measured over a trajectory.

    Attributes
    ----------
    name : str
        Series label (e.g. "Lys_PLP"), used as the merged-table column name
    frames : NDArray[np.int64]
        Frame indices (1-indexed, strictly increasing), read-only
    values : NDArray[np.float64]
        Measured values (finite, >= 0), read-only
    source : str
        File path or stream name the series was read from
    """

    name: str
    frames: NDArray[np.int64]
    values: NDArray[np.float64]
    source: str = "<memory>"

    def __post_init__(self) -> None:
        frames = np.array(self.frames, dtype=np.int64)
        values = np.array(self.values, dtype=np.float64)

        if frames.ndim != 1 or frames.shape != values.shape:
            raise MalformedSeries(
                self.source,
                None,
                f"frames {frames.shape} and values {values.shape} must be 1D of equal length",
            )
        if len(frames) == 0:
            raise MalformedSeries(self.source, None, "series has no data rows")
        if frames.min() < 1:
            raise MalformedSeries(self.source, None, "frame indices must be >= 1")
        if np.any(np.diff(frames) <= 0):
            raise MalformedSeries(self.source, None, "frame indices must be strictly increasing")
        if not np.all(np.isfinite(values)) or values.min() < 0:
            raise MalformedSeries(self.source, None, "values must be finite and >= 0")

        frames.setflags(write=False)
        values.setflags(write=False)
        object.__setattr__(self, "frames", frames)
        object.__setattr__(self, "values", values)

    def __len__(self) -> int:
        return len(self.frames)

    @property
    def frame_set(self) -> frozenset[int]:
        """Frame indices as a set."""
        return frozenset(int(f) for f in self.frames)

    @classmethod
    def from_pairs(
        cls,
        name: str,
        pairs: Iterable[tuple[int, float]],
        source: str = "<memory>",
    ) -> "MeasurementSeries":
        """Build a series from ``(frame, value)`` pairs."""
        pairs = list(pairs)
        frames: ArrayLike = [p[0] for p in pairs]
        values: ArrayLike = [p[1] for p in pairs]
        return cls(name=name, frames=frames, values=values, source=source)


def _name_from_header(header: str) -> str | None:
    tokens = header.strip().lstrip("#").split()
    if len(tokens) >= 2:
        return tokens[1]
    return None


def parse_series_lines(
    lines: Iterable[str],
    source: str,
    name: str | None = None,
) -> MeasurementSeries:
    """Parse series text into a :class:`MeasurementSeries`.

    Parameters
    ----------
    lines : iterable of str
        Text lines, starting with the header line
    source : str
        Name used in error messages and stored on the series
    name : str, optional
        Explicit series name. Defaults to the second header token, then to
        the stem of ``source``.

    Returns
    -------
    MeasurementSeries
        Parsed series

    Raises
    ------
    MalformedSeries
        If the text is empty, has no data rows, or any row is invalid
    """
    iterator = iter(lines)
    try:
        header = next(iterator)
    except StopIteration:
        raise MalformedSeries(source, None, "file is empty") from None

    if name is None:
        name = _name_from_header(header) or Path(source).stem

    frames: list[int] = []
    values: list[float] = []

    # Header is line 1
    for line_number, line in enumerate(iterator, start=2):
        tokens = line.split()
        if not tokens:
            continue
        if len(tokens) != 2:
            raise MalformedSeries(
                source, line_number, f"expected 2 columns, found {len(tokens)}: {line.strip()!r}"
            )

        try:
            frame = int(tokens[0])
        except ValueError:
            raise MalformedSeries(
                source, line_number, f"frame index {tokens[0]!r} is not an integer"
            ) from None
        try:
            value = float(tokens[1])
        except ValueError:
            raise MalformedSeries(
                source, line_number, f"value {tokens[1]!r} is not a number"
            ) from None

        if frame < 1:
            raise MalformedSeries(source, line_number, f"frame index {frame} is < 1")
        if frames and frame <= frames[-1]:
            raise MalformedSeries(
                source,
                line_number,
                f"frame index {frame} does not follow previous index {frames[-1]}",
            )
        if not math.isfinite(value) or value < 0:
            raise MalformedSeries(source, line_number, f"value {value} must be finite and >= 0")

        frames.append(frame)
        values.append(value)

    if not frames:
        raise MalformedSeries(source, None, "no data rows after header")

    return MeasurementSeries(name=name, frames=frames, values=values, source=source)


def load_series(source: SeriesSource, name: str | None = None) -> MeasurementSeries:
    """Load one series from a file path or an open text stream.

    Parameters
    ----------
    source : str, Path, or text stream
        File to read. Streams are read from their current position.
    name : str, optional
        Explicit series name (see :func:`parse_series_lines`)

    Returns
    -------
    MeasurementSeries
        Parsed series
    """
    if isinstance(source, (str, Path)):
        path = Path(source)
        with open(path) as f:
            series = parse_series_lines(f, source=str(path), name=name)
    else:
        stream_name = str(getattr(source, "name", "<stream>"))
        series = parse_series_lines(source, source=stream_name, name=name)

    LOGGER.debug(f"Loaded series '{series.name}' ({len(series)} frames) from {series.source}")
    return series


class SeriesLoader:
    """Load several measurement series, one per input.

    Parameters
    ----------
    sources : sequence of str, Path, or text stream
        Inputs to read, in the order the series should appear in the table
    names : sequence of str or None, optional
        Explicit names, one per source (None entries fall back to the header)

    Examples
    --------
    >>> loader = SeriesLoader(
    ...     ["dist_lys_plp.dat", "dist_plp_uni.dat", "dist_plp_unl.dat"],
    ... )
    >>> series = loader.load()
    >>> [s.name for s in series]
    ['Lys_PLP', 'PLP_UNI', 'PLP_UNL']
    """

    def __init__(
        self,
        sources: Sequence[SeriesSource],
        names: Sequence[str | None] | None = None,
    ) -> None:
        if names is not None and len(names) != len(sources):
            raise ValueError(f"Got {len(names)} names for {len(sources)} series sources")
        self.sources = list(sources)
        self.names = list(names) if names is not None else [None] * len(self.sources)

    def load(self) -> list[MeasurementSeries]:
        """Read every source.

        Returns
        -------
        list[MeasurementSeries]
            Series in input order

        Raises
        ------
        MalformedSeries
            If any input fails to parse (no partial result is returned)
        ValueError
            If no sources were given or two series share a name
        """
        if not self.sources:
            raise ValueError("At least one measurement series is required")

        series = [load_series(src, name) for src, name in zip(self.sources, self.names)]

        seen: dict[str, str] = {}
        for s in series:
            if s.name in seen:
                raise ValueError(
                    f"Duplicate series name '{s.name}' ({seen[s.name]} and {s.source}); "
                    "pass explicit labels to disambiguate"
                )
            seen[s.name] = s.source

        LOGGER.info(f"Loaded {len(series)} series: {', '.join(seen)}")
        return series
