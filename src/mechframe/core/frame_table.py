"""Frame-aligned measurement table.

The FrameTable is the shared data model for scoring and selection: one row per
frame index, one column per measurement series. Series are aligned by an inner
join on frame index, so a frame that any upstream tool failed to write is
dropped from every column instead of shifting the remaining values into the
wrong rows (the failure mode of pasting files side by side).

Merged tables are written with a ``Frame <name_1> ... <name_k>`` header and can
be read back by header name.
"""

from __future__ import annotations

import logging
import math
from functools import reduce
from pathlib import Path
from typing import Mapping, Sequence

import numpy as np
from numpy.typing import ArrayLike, NDArray

from mechframe.constants import FRAME_COLUMN
from mechframe.core.series import MeasurementSeries
from mechframe.exceptions import MalformedSeries, NoCommonFrames

LOGGER = logging.getLogger(__name__)


class FrameTable:
    """Inner-joined table of measurement series keyed by frame index.

    Parameters
    ----------
    frames : array-like of int
        Frame indices, strictly increasing
    values : array-like of float, shape (n_frames, n_series)
        One column per series, in ``series_names`` order
    series_names : sequence of str
        Column names
    dropped_frames : mapping of str to int, optional
        Frames of each series that were not common to all series

    Notes
    -----
    Instances are immutable: the arrays are stored as read-only copies.
    Use :meth:`from_series` to build a table from loaded series.
    """

    def __init__(
        self,
        frames: ArrayLike,
        values: ArrayLike,
        series_names: Sequence[str],
        dropped_frames: Mapping[str, int] | None = None,
    ) -> None:
        frames_arr = np.array(frames, dtype=np.int64)
        values_arr = np.array(values, dtype=np.float64)
        names = list(series_names)

        if not names:
            raise ValueError("FrameTable needs at least one series")
        if len(set(names)) != len(names):
            raise ValueError(f"Series names must be unique: {names}")
        if frames_arr.ndim != 1:
            raise ValueError("frames must be one-dimensional")
        if values_arr.shape != (len(frames_arr), len(names)):
            raise ValueError(
                f"values shape {values_arr.shape} does not match "
                f"({len(frames_arr)} frames, {len(names)} series)"
            )
        if len(frames_arr) and np.any(np.diff(frames_arr) <= 0):
            raise ValueError("frames must be strictly increasing")

        frames_arr.setflags(write=False)
        values_arr.setflags(write=False)
        self._frames = frames_arr
        self._values = values_arr
        self._names = tuple(names)
        self._dropped = {name: int((dropped_frames or {}).get(name, 0)) for name in names}

    @classmethod
    def from_series(cls, series: Sequence[MeasurementSeries]) -> "FrameTable":
        """Align series on their common frame indices.

        Parameters
        ----------
        series : sequence of MeasurementSeries
            Series in the order their columns should appear

        Returns
        -------
        FrameTable
            Table over the intersection of all frame-index sets

        Raises
        ------
        ValueError
            If no series are given
        NoCommonFrames
            If the series share no frame index
        """
        if not series:
            raise ValueError("At least one measurement series is required")

        names = [s.name for s in series]
        common = reduce(np.intersect1d, [s.frames for s in series])

        if len(common) == 0:
            raise NoCommonFrames(names)

        columns = []
        dropped = {}
        for s in series:
            # Series frames are sorted and contain every common frame
            idx = np.searchsorted(s.frames, common)
            columns.append(s.values[idx])
            dropped[s.name] = len(s) - len(common)
            if dropped[s.name]:
                LOGGER.warning(
                    f"Series '{s.name}': {dropped[s.name]} of {len(s)} frames "
                    "are missing from other series and were dropped"
                )

        LOGGER.info(f"Aligned {len(names)} series over {len(common)} common frames")
        return cls(common, np.column_stack(columns), names, dropped)

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def frames(self) -> NDArray[np.int64]:
        return self._frames

    @property
    def values(self) -> NDArray[np.float64]:
        return self._values

    @property
    def series_names(self) -> tuple[str, ...]:
        return self._names

    @property
    def n_frames(self) -> int:
        return len(self._frames)

    @property
    def n_series(self) -> int:
        return len(self._names)

    @property
    def dropped_frames(self) -> dict[str, int]:
        """Dropped-frame count per series (copy)."""
        return dict(self._dropped)

    def __len__(self) -> int:
        return self.n_frames

    def __repr__(self) -> str:
        return f"FrameTable(n_frames={self.n_frames}, series={list(self._names)})"

    def column(self, name: str) -> NDArray[np.float64]:
        """Values of one series, aligned with :attr:`frames`."""
        try:
            idx = self._names.index(name)
        except ValueError:
            raise KeyError(f"Unknown series '{name}'. Available: {list(self._names)}") from None
        return self._values[:, idx]

    def row(self, frame: int) -> NDArray[np.float64]:
        """Values of one frame, in series order."""
        idx = int(np.searchsorted(self._frames, frame))
        if idx >= len(self._frames) or self._frames[idx] != frame:
            raise KeyError(f"Frame {frame} is not in the table")
        return self._values[idx]

    # -------------------------------------------------------------------------
    # I/O
    # -------------------------------------------------------------------------

    def to_text(self, float_format: str = "%.4f") -> str:
        """Render the merged table as whitespace-delimited text."""
        lines = [" ".join((FRAME_COLUMN, *self._names))]
        for frame, row in zip(self._frames, self._values):
            cells = [float_format % v for v in row]
            lines.append(" ".join([str(int(frame)), *cells]))
        return "\n".join(lines) + "\n"

    def write(self, path: str | Path, float_format: str = "%.4f") -> Path:
        """Write the merged table.

        Parameters
        ----------
        path : str or Path
            Output file. Parent directories will be created.
        float_format : str, optional
            printf-style format for values. Default "%.4f".

        Returns
        -------
        Path
            Path to the written file
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.to_text(float_format))
        LOGGER.info(f"Wrote merged table ({self.n_frames} frames) to {path}")
        return path

    @classmethod
    def read(cls, path: str | Path) -> "FrameTable":
        """Read a merged table written by :meth:`write`.

        Columns are matched by header name; the frame column must be named
        ``Frame`` (a leading ``#`` is ignored) but may appear at any position.

        Raises
        ------
        MalformedSeries
            If the header lacks a frame column or any row is invalid
        """
        path = Path(path)
        source = str(path)

        with open(path) as f:
            lines = f.readlines()

        if not lines:
            raise MalformedSeries(source, None, "file is empty")

        header = lines[0].strip().lstrip("#").split()
        lowered = [h.lower() for h in header]
        if FRAME_COLUMN.lower() not in lowered:
            raise MalformedSeries(source, 1, f"header has no '{FRAME_COLUMN}' column")
        frame_col = lowered.index(FRAME_COLUMN.lower())
        names = [h for i, h in enumerate(header) if i != frame_col]
        if not names:
            raise MalformedSeries(source, 1, "header names no measurement columns")
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise MalformedSeries(source, 1, f"duplicate column names: {', '.join(duplicates)}")

        frames: list[int] = []
        rows: list[list[float]] = []
        for line_number, line in enumerate(lines[1:], start=2):
            tokens = line.split()
            if not tokens:
                continue
            if len(tokens) != len(header):
                raise MalformedSeries(
                    source,
                    line_number,
                    f"expected {len(header)} columns, found {len(tokens)}",
                )
            try:
                frame = int(tokens[frame_col])
                row = [float(t) for i, t in enumerate(tokens) if i != frame_col]
            except ValueError as e:
                raise MalformedSeries(source, line_number, str(e)) from None

            if frame < 1 or (frames and frame <= frames[-1]):
                raise MalformedSeries(
                    source, line_number, f"frame index {frame} is out of order or < 1"
                )
            if any(not math.isfinite(v) or v < 0 for v in row):
                raise MalformedSeries(source, line_number, "values must be finite and >= 0")

            frames.append(frame)
            rows.append(row)

        if not frames:
            raise MalformedSeries(source, None, "no data rows after header")

        return cls(frames, rows, names)
