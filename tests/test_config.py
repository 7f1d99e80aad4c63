"""Tests for run configuration loading and validation (config/)."""

from __future__ import annotations

import sys

import pytest
import yaml
from pydantic import ValidationError

# Ensure src/ is on the path when running directly or via pytest from repo root
sys.path.insert(0, "src")

from mechframe.config import (
    OutputConfig,
    RankingConfig,
    ScoringConfig,
    generate_config_template,
    load_config,
    load_config_dict,
    save_config,
)


def _write_yaml(path, data):
    path.write_text(yaml.safe_dump(data))
    return path


class TestSchema:
    def test_minimal_config_defaults(self):
        config = RankingConfig(series=[{"path": "a.dat"}])
        assert config.name == "mechframe"
        assert config.scoring.combination == "sum"
        assert config.scoring.weights == {}
        assert config.clusters is None
        assert config.output.round_digits == 3
        assert config.output.top_n == 5

    def test_series_required(self):
        with pytest.raises(ValidationError):
            RankingConfig(series=[])

    def test_unknown_combination(self):
        with pytest.raises(ValidationError, match="Unknown combination 'median'"):
            ScoringConfig(combination="median")

    def test_negative_weight(self):
        with pytest.raises(ValidationError, match="must be >= 0"):
            ScoringConfig(weights={"a": -1.0})

    def test_duplicate_labels(self):
        with pytest.raises(ValidationError, match="Duplicate series labels"):
            RankingConfig(
                series=[{"path": "a.dat", "label": "x"}, {"path": "b.dat", "label": "x"}]
            )

    def test_weight_for_unknown_label(self):
        with pytest.raises(ValidationError, match="unknown series"):
            RankingConfig(
                series=[{"path": "a.dat", "label": "x"}],
                scoring={"weights": {"y": 2.0}},
            )

    def test_weights_deferred_when_labels_come_from_headers(self):
        config = RankingConfig(series=[{"path": "a.dat"}], scoring={"weights": {"y": 2.0}})
        assert config.scoring.weights == {"y": 2.0}

    def test_invalid_float_format(self):
        with pytest.raises(ValidationError, match="Invalid float_format"):
            OutputConfig(float_format="%d %d")

    def test_invalid_top_n(self):
        with pytest.raises(ValidationError):
            OutputConfig(top_n=0)

    def test_hash_depends_on_scoring_not_output(self):
        base = RankingConfig(series=[{"path": "a.dat"}])
        other_output = RankingConfig(series=[{"path": "a.dat"}], output={"top_n": 10})
        other_policy = RankingConfig(series=[{"path": "a.dat"}], scoring={"combination": "max"})

        assert len(base.compute_hash()) == 16
        assert base.compute_hash() == other_output.compute_hash()
        assert base.compute_hash() != other_policy.compute_hash()


class TestLoader:
    def test_relative_paths_resolve_against_config_dir(self, tmp_path):
        path = _write_yaml(
            tmp_path / "mechframe.yaml",
            {
                "series": [{"path": "dist_lys_plp.dat", "label": "Lys_PLP"}],
                "clusters": {"summary": "clusters/summary.dat"},
                "output": {"report": "out/report.json"},
            },
        )
        config = load_config(path)

        assert config.series[0].path == tmp_path / "dist_lys_plp.dat"
        assert config.clusters.summary == tmp_path / "clusters" / "summary.dat"
        assert config.output.report == tmp_path / "out" / "report.json"

    def test_environment_variables_expand(self, tmp_path, monkeypatch):
        monkeypatch.setenv("MECHFRAME_DATA", str(tmp_path / "data"))
        config = load_config_dict({"series": [{"path": "$MECHFRAME_DATA/a.dat"}]})
        assert config.series[0].path == tmp_path / "data" / "a.dat"

    def test_non_path_strings_are_untouched(self, tmp_path):
        config = load_config_dict(
            {"name": "run1", "series": [{"path": "a.dat", "label": "Lys_PLP"}]},
            base_path=tmp_path,
        )
        assert config.name == "run1"
        assert config.series[0].label == "Lys_PLP"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ValueError, match="must contain a mapping"):
            load_config(path)

    def test_save_writes_relative_paths(self, tmp_path):
        config = load_config_dict(
            {"series": [{"path": "a.dat", "label": "a"}], "output": {"report": "r.json"}},
            base_path=tmp_path,
        )
        dest = tmp_path / "saved.yaml"
        save_config(config, dest)

        data = yaml.safe_load(dest.read_text())
        assert data["series"][0]["path"] == "a.dat"
        assert data["output"]["report"] == "r.json"

        reloaded = load_config(dest)
        assert reloaded.series[0].path == config.series[0].path

    def test_template_is_loadable(self, tmp_path):
        path = tmp_path / "mechframe.yaml"
        path.write_text(generate_config_template("plp_ligands"))
        config = RankingConfig.from_yaml(path)

        assert config.name == "plp_ligands"
        assert [s.label for s in config.series] == ["Lys_PLP", "PLP_UNI", "PLP_UNL"]
        assert config.clusters is not None

    def test_validate_config_reports_missing_files(self, tmp_path):
        (tmp_path / "a.dat").write_text("#Frame a\n1 1.0\n")
        config = load_config_dict(
            {
                "series": [{"path": "a.dat"}, {"path": "b.dat"}],
                "clusters": {"summary": "summary.dat"},
            },
            base_path=tmp_path,
        )
        issues = config.validate_config()
        assert len(issues) == 2
        assert any("b.dat" in issue for issue in issues)
        assert any("Cluster summary not found" in issue for issue in issues)
