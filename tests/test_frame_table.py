"""Unit tests for frame alignment (core/frame_table.py).

Test categories
---------------
A. Alignment – inner join on frame index, never positional.
B. Table invariants – immutability, accessors, constructor validation.
C. Merged table I/O – write/read by header name.
"""

from __future__ import annotations

import logging
import sys

import numpy as np
import pytest

# Ensure src/ is on the path when running directly or via pytest from repo root
sys.path.insert(0, "src")

from mechframe.core.frame_table import FrameTable
from mechframe.core.series import MeasurementSeries
from mechframe.exceptions import MalformedSeries, NoCommonFrames


def _series(name, pairs):
    return MeasurementSeries.from_pairs(name, pairs)


# ---------------------------------------------------------------------------
# A. Alignment
# ---------------------------------------------------------------------------


class TestAlignment:
    def test_identical_frame_sets(self):
        a = _series("a", [(1, 2.0), (2, 3.0), (3, 4.0)])
        b = _series("b", [(1, 1.0), (2, 1.0), (3, 1.0)])
        table = FrameTable.from_series([a, b])

        assert table.frames.tolist() == [1, 2, 3]
        assert table.series_names == ("a", "b")
        assert table.values.tolist() == [[2.0, 1.0], [3.0, 1.0], [4.0, 1.0]]
        assert table.dropped_frames == {"a": 0, "b": 0}

    def test_missing_frame_is_dropped_not_shifted(self):
        # b lacks frame 2: positional pasting would pair a@3 with b@3's value at row 2
        a = _series("a", [(1, 10.0), (2, 20.0), (3, 30.0)])
        b = _series("b", [(1, 1.0), (3, 3.0)])
        table = FrameTable.from_series([a, b])

        assert table.frames.tolist() == [1, 3]
        assert table.row(3).tolist() == [30.0, 3.0]
        assert table.dropped_frames == {"a": 1, "b": 0}

    def test_rows_come_from_the_same_frame(self):
        a = _series("a", [(f, float(f)) for f in range(1, 11)])
        b = _series("b", [(f, float(f) * 10) for f in range(4, 15)])
        c = _series("c", [(f, float(f) * 100) for f in (2, 4, 6, 8, 10, 12)])
        table = FrameTable.from_series([a, b, c])

        assert table.frames.tolist() == [4, 6, 8, 10]
        for frame, row in zip(table.frames, table.values):
            assert row.tolist() == [frame, frame * 10, frame * 100]

    def test_dropped_frames_are_logged(self, caplog):
        a = _series("a", [(1, 1.0), (2, 2.0)])
        b = _series("b", [(1, 1.0)])
        with caplog.at_level(logging.WARNING, logger="mechframe.core.frame_table"):
            FrameTable.from_series([a, b])
        assert "Series 'a': 1 of 2 frames" in caplog.text

    def test_no_common_frames(self):
        a = _series("a", [(1, 1.0), (2, 2.0)])
        b = _series("b", [(3, 1.0), (4, 2.0)])
        with pytest.raises(NoCommonFrames) as excinfo:
            FrameTable.from_series([a, b])
        assert excinfo.value.series_names == ["a", "b"]

    def test_single_series(self):
        table = FrameTable.from_series([_series("a", [(1, 1.0), (2, 2.0)])])
        assert table.n_series == 1
        assert table.column("a").tolist() == [1.0, 2.0]

    def test_no_series(self):
        with pytest.raises(ValueError, match="At least one"):
            FrameTable.from_series([])


# ---------------------------------------------------------------------------
# B. Table invariants
# ---------------------------------------------------------------------------


class TestFrameTable:
    @pytest.fixture
    def table(self):
        return FrameTable([1, 2, 3], [[2.0, 1.0], [3.0, 1.0], [4.0, 1.0]], ["a", "b"])

    def test_shape(self, table):
        assert table.n_frames == 3
        assert len(table) == 3
        assert table.n_series == 2
        assert table.values.shape == (3, 2)

    def test_values_are_read_only(self, table):
        with pytest.raises(ValueError):
            table.values[0, 0] = 0.0
        with pytest.raises(ValueError):
            table.frames[0] = 5

    def test_dropped_frames_is_a_copy(self, table):
        table.dropped_frames["a"] = 99
        assert table.dropped_frames["a"] == 0

    def test_column_and_row(self, table):
        assert table.column("b").tolist() == [1.0, 1.0, 1.0]
        assert table.row(2).tolist() == [3.0, 1.0]

    def test_unknown_column(self, table):
        with pytest.raises(KeyError, match="Unknown series 'c'"):
            table.column("c")

    def test_unknown_row(self, table):
        with pytest.raises(KeyError, match="Frame 7"):
            table.row(7)

    def test_shape_mismatch_rejected(self):
        with pytest.raises(ValueError, match="does not match"):
            FrameTable([1, 2], [[1.0], [2.0], [3.0]], ["a"])

    def test_duplicate_names_rejected(self):
        with pytest.raises(ValueError, match="unique"):
            FrameTable([1], [[1.0, 2.0]], ["a", "a"])

    def test_unsorted_frames_rejected(self):
        with pytest.raises(ValueError, match="strictly increasing"):
            FrameTable([2, 1], [[1.0], [2.0]], ["a"])


# ---------------------------------------------------------------------------
# C. Merged table I/O
# ---------------------------------------------------------------------------


class TestMergedTableIO:
    def test_to_text_layout(self):
        table = FrameTable([1, 2], [[2.0, 1.5], [3.25, 1.0]], ["Lys_PLP", "PLP_UNI"])
        text = table.to_text()
        assert text.splitlines() == [
            "Frame Lys_PLP PLP_UNI",
            "1 2.0000 1.5000",
            "2 3.2500 1.0000",
        ]

    def test_write_then_read(self, tmp_path):
        table = FrameTable([1, 4], [[2.0, 1.5], [3.25, 1.0]], ["Lys_PLP", "PLP_UNI"])
        path = table.write(tmp_path / "out" / "plp_all_dist.dat")

        loaded = FrameTable.read(path)
        assert loaded.series_names == ("Lys_PLP", "PLP_UNI")
        assert loaded.frames.tolist() == [1, 4]
        np.testing.assert_allclose(loaded.values, table.values)

    def test_read_matches_columns_by_name(self, tmp_path):
        path = tmp_path / "t.dat"
        path.write_text("#b Frame a\n1.0 1 2.0\n3.0 2 4.0\n")
        table = FrameTable.read(path)
        assert table.series_names == ("b", "a")
        assert table.frames.tolist() == [1, 2]
        assert table.column("a").tolist() == [2.0, 4.0]

    def test_read_requires_frame_column(self, tmp_path):
        path = tmp_path / "t.dat"
        path.write_text("idx a\n1 2.0\n")
        with pytest.raises(MalformedSeries, match="no 'Frame' column"):
            FrameTable.read(path)

    def test_read_rejects_short_row(self, tmp_path):
        path = tmp_path / "t.dat"
        path.write_text("Frame a b\n1 2.0 3.0\n2 4.0\n")
        with pytest.raises(MalformedSeries, match="line 3"):
            FrameTable.read(path)

    def test_read_rejects_duplicate_columns(self, tmp_path):
        path = tmp_path / "t.dat"
        path.write_text("Frame a a\n1 2.0 3.0\n")
        with pytest.raises(MalformedSeries, match="duplicate column names: a") as excinfo:
            FrameTable.read(path)
        assert excinfo.value.line_number == 1
