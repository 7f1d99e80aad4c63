"""Test that all public modules can be imported."""

import sys

import pytest

# Ensure src/ is on the path when running directly or via pytest from repo root
sys.path.insert(0, "src")


class TestImports:
    """Test basic package imports."""

    def test_import_mechframe(self):
        """Test main package import."""
        import mechframe

        assert hasattr(mechframe, "__version__")

    def test_lazy_attributes(self):
        """Test lazily imported top-level names."""
        import mechframe

        for name in mechframe.__all__:
            assert getattr(mechframe, name) is not None

    def test_unknown_attribute(self):
        import mechframe

        with pytest.raises(AttributeError):
            mechframe.NoSuchThing

    def test_import_core(self):
        """Test core module imports."""
        from mechframe.core import (
            CompositeScorer,
            FrameTable,
            MeasurementSeries,
            SeriesLoader,
            select_best_frame,
        )

        assert MeasurementSeries is not None
        assert SeriesLoader is not None
        assert FrameTable is not None
        assert CompositeScorer is not None
        assert select_best_frame is not None

    def test_import_clusters(self):
        from mechframe.clusters import ClusterSummaryReader, RepresentativeReconciler

        assert ClusterSummaryReader is not None
        assert RepresentativeReconciler is not None

    def test_exception_hierarchy(self):
        from mechframe.exceptions import (
            DegenerateScoreRange,
            InconsistentClusterSummary,
            MalformedSeries,
            MechFrameError,
            NoCommonFrames,
            UnmatchedFrame,
        )

        fatal = (MalformedSeries, NoCommonFrames, DegenerateScoreRange, InconsistentClusterSummary)
        for exc in fatal:
            assert issubclass(exc, MechFrameError)
        assert issubclass(UnmatchedFrame, UserWarning)
        assert not issubclass(UnmatchedFrame, MechFrameError)

    def test_version_format(self):
        """Test version string format."""
        import mechframe

        version = mechframe.__version__
        # Should be semver format: X.Y.Z
        parts = version.split(".")
        assert len(parts) >= 2, f"Version {version} should have at least major.minor"
        assert parts[0].isdigit(), f"Major version should be numeric: {parts[0]}"
        assert parts[1].isdigit(), f"Minor version should be numeric: {parts[1]}"


class TestFormatters:
    """Test report formatting entry points."""

    @pytest.fixture
    def report(self):
        from mechframe.results.reports import RankedFrame, ScoringReport

        return ScoringReport(
            name="plp_ligands",
            series_names=["Lys_PLP"],
            n_frames=3,
            best_frame=2,
            composite_score=6.0,
            dmcs=1 / 3,
            top_frames=[RankedFrame(rank=1, frame=2, score=6.0)],
            warnings=["Series 'Lys_PLP' had 1 frame(s) missing from other series; dropped"],
        )

    def test_table(self, report):
        from mechframe.formatters import format_report

        text = format_report(report)
        assert "Frame Ranking: plp_ligands" in text
        assert "WARNING: Series 'Lys_PLP'" in text

    def test_markdown(self, report):
        from mechframe.formatters import format_report

        text = format_report(report, format="markdown")
        assert "| Best frame | 2 |" in text
        assert "**Analysis:** frame_scoring" in text
        assert "## Warnings" in text

    def test_json(self, report):
        import json

        from mechframe.formatters import format_report

        assert json.loads(format_report(report, format="json"))["best_frame"] == 2

    def test_unknown_format(self, report):
        from mechframe.formatters import format_report

        with pytest.raises(ValueError, match="Unknown format: csv"):
            format_report(report, format="csv")
