"""Unit tests for measurement series loading (core/series.py).

Test categories
---------------
A. Row parsing – header handling, blank lines, name resolution.
B. Strictness – every malformed row fails the whole load with file and line.
C. MeasurementSeries invariants – validation and immutability.
D. SeriesLoader – multi-file loading, labels, duplicate names.
"""

from __future__ import annotations

import io
import sys

import numpy as np
import pytest

# Ensure src/ is on the path when running directly or via pytest from repo root
sys.path.insert(0, "src")

from mechframe.core.series import (
    MeasurementSeries,
    SeriesLoader,
    load_series,
    parse_series_lines,
)
from mechframe.exceptions import MalformedSeries, MechFrameError


def _write(tmp_path, name, text):
    path = tmp_path / name
    path.write_text(text)
    return path


# ---------------------------------------------------------------------------
# A. Row parsing
# ---------------------------------------------------------------------------


class TestParsing:
    def test_cpptraj_layout(self):
        lines = ["#Frame      Lys_PLP\n", "       1       3.2145\n", "       2       3.0871\n"]
        series = parse_series_lines(lines, source="dist_lys_plp.dat")

        assert series.name == "Lys_PLP"
        assert series.frames.tolist() == [1, 2]
        assert series.values.tolist() == pytest.approx([3.2145, 3.0871])
        assert series.source == "dist_lys_plp.dat"

    def test_explicit_name_overrides_header(self):
        lines = ["#Frame Lys_PLP", "1 3.0"]
        series = parse_series_lines(lines, source="x.dat", name="lysine")
        assert series.name == "lysine"

    def test_name_falls_back_to_file_stem(self):
        lines = ["#Frame", "1 3.0", "2 4.0"]
        series = parse_series_lines(lines, source="data/dist_plp_uni.dat")
        assert series.name == "dist_plp_uni"

    def test_blank_lines_are_skipped(self):
        lines = ["#Frame d", "1 3.0", "", "   ", "2 4.0", ""]
        series = parse_series_lines(lines, source="d.dat")
        assert series.frames.tolist() == [1, 2]

    def test_gaps_in_frame_indices_are_allowed(self):
        series = parse_series_lines(["#Frame d", "1 1.0", "5 2.0", "9 3.0"], source="d.dat")
        assert series.frames.tolist() == [1, 5, 9]

    def test_scientific_notation_values(self):
        series = parse_series_lines(["#Frame d", "1 3.2e0", "2 1E-1"], source="d.dat")
        assert series.values.tolist() == pytest.approx([3.2, 0.1])

    def test_load_from_path(self, tmp_path):
        path = _write(tmp_path, "dist_lys_plp.dat", "#Frame Lys_PLP\n1 3.0\n2 2.5\n")
        series = load_series(path)
        assert series.name == "Lys_PLP"
        assert series.source == str(path)
        assert len(series) == 2

    def test_load_from_stream(self):
        stream = io.StringIO("#Frame PLP_UNL\n1 4.0\n2 3.5\n")
        series = load_series(stream)
        assert series.name == "PLP_UNL"
        assert series.source == "<stream>"


# ---------------------------------------------------------------------------
# B. Strictness
# ---------------------------------------------------------------------------


class TestMalformedRows:
    @pytest.mark.parametrize(
        "row, reason",
        [
            ("2 abc", "not a number"),
            ("two 3.0", "not an integer"),
            ("2 3.0 4.0", "expected 2 columns"),
            ("2", "expected 2 columns"),
            ("0 3.0", "< 1"),
            ("2 -0.5", "finite and >= 0"),
            ("2 nan", "finite and >= 0"),
            ("2 inf", "finite and >= 0"),
        ],
    )
    def test_bad_row_names_file_and_line(self, row, reason):
        lines = ["#Frame d", "1 3.0", row]
        with pytest.raises(MalformedSeries, match=reason) as excinfo:
            parse_series_lines(lines, source="d.dat")

        err = excinfo.value
        assert err.source == "d.dat"
        assert err.line_number == 3
        assert "d.dat, line 3" in str(err)

    def test_duplicate_frame_index(self):
        with pytest.raises(MalformedSeries, match="does not follow"):
            parse_series_lines(["#Frame d", "1 3.0", "1 3.1"], source="d.dat")

    def test_decreasing_frame_index(self):
        with pytest.raises(MalformedSeries, match="does not follow"):
            parse_series_lines(["#Frame d", "2 3.0", "1 3.1"], source="d.dat")

    def test_empty_file(self):
        with pytest.raises(MalformedSeries, match="file is empty"):
            parse_series_lines([], source="d.dat")

    def test_header_only(self):
        with pytest.raises(MalformedSeries, match="no data rows") as excinfo:
            parse_series_lines(["#Frame d", "", ""], source="d.dat")
        assert excinfo.value.line_number is None

    def test_malformed_is_a_mechframe_error(self):
        with pytest.raises(MechFrameError):
            parse_series_lines(["#Frame d", "x y"], source="d.dat")

    def test_truncated_file_from_disk(self, tmp_path):
        path = _write(tmp_path, "trunc.dat", "#Frame d\n1 3.0\n2 3.")
        # "3." is a valid float; a truncated frame index is not
        assert load_series(path).values.tolist() == pytest.approx([3.0, 3.0])

        path = _write(tmp_path, "trunc2.dat", "#Frame d\n1 3.0\n2")
        with pytest.raises(MalformedSeries, match="line 3"):
            load_series(path)


# ---------------------------------------------------------------------------
# C. MeasurementSeries invariants
# ---------------------------------------------------------------------------


class TestMeasurementSeries:
    def test_from_pairs(self):
        series = MeasurementSeries.from_pairs("d", [(1, 2.0), (3, 4.0)])
        assert series.frames.tolist() == [1, 3]
        assert series.frame_set == frozenset({1, 3})

    def test_arrays_are_read_only(self):
        series = MeasurementSeries.from_pairs("d", [(1, 2.0), (2, 4.0)])
        with pytest.raises(ValueError):
            series.values[0] = 0.0
        with pytest.raises(ValueError):
            series.frames[0] = 9

    def test_caller_array_is_copied(self):
        values = np.array([1.0, 2.0])
        series = MeasurementSeries("d", np.array([1, 2]), values)
        values[0] = 99.0
        assert series.values[0] == 1.0

    def test_length_mismatch(self):
        with pytest.raises(MalformedSeries, match="equal length"):
            MeasurementSeries("d", [1, 2, 3], [1.0, 2.0])

    def test_unsorted_frames(self):
        with pytest.raises(MalformedSeries, match="strictly increasing"):
            MeasurementSeries("d", [2, 1], [1.0, 2.0])

    def test_negative_value(self):
        with pytest.raises(MalformedSeries, match=">= 0"):
            MeasurementSeries("d", [1, 2], [1.0, -2.0])

    def test_empty(self):
        with pytest.raises(MalformedSeries, match="no data rows"):
            MeasurementSeries("d", [], [])


# ---------------------------------------------------------------------------
# D. SeriesLoader
# ---------------------------------------------------------------------------


class TestSeriesLoader:
    def test_loads_in_input_order(self, tmp_path):
        a = _write(tmp_path, "a.dat", "#Frame Lys_PLP\n1 2.0\n2 3.0\n")
        b = _write(tmp_path, "b.dat", "#Frame PLP_UNI\n1 1.0\n2 1.0\n")
        series = SeriesLoader([b, a]).load()
        assert [s.name for s in series] == ["PLP_UNI", "Lys_PLP"]

    def test_explicit_names(self, tmp_path):
        a = _write(tmp_path, "a.dat", "#Frame dist\n1 2.0\n")
        b = _write(tmp_path, "b.dat", "#Frame dist\n1 1.0\n")
        series = SeriesLoader([a, b], names=["first", None]).load()
        assert [s.name for s in series] == ["first", "dist"]

    def test_duplicate_names_rejected(self, tmp_path):
        a = _write(tmp_path, "a.dat", "#Frame dist\n1 2.0\n")
        b = _write(tmp_path, "b.dat", "#Frame dist\n1 1.0\n")
        with pytest.raises(ValueError, match="Duplicate series name 'dist'"):
            SeriesLoader([a, b]).load()

    def test_names_length_mismatch(self, tmp_path):
        a = _write(tmp_path, "a.dat", "#Frame dist\n1 2.0\n")
        with pytest.raises(ValueError, match="names"):
            SeriesLoader([a], names=["x", "y"])

    def test_no_sources(self):
        with pytest.raises(ValueError, match="At least one"):
            SeriesLoader([]).load()

    def test_one_malformed_file_fails_the_load(self, tmp_path):
        a = _write(tmp_path, "a.dat", "#Frame a\n1 2.0\n")
        b = _write(tmp_path, "b.dat", "#Frame b\n1 oops\n")
        with pytest.raises(MalformedSeries, match="b.dat"):
            SeriesLoader([a, b]).load()
