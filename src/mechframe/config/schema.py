"""
Pydantic schema for MechFrame run configuration.

A run configuration names the measurement series to combine, how to
combine them, the optional clustering output to reconcile against, and
where to write results. It is usually stored as ``mechframe.yaml`` next to
the distance files it refers to.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from mechframe.constants import DEFAULT_COMBINATION, DEFAULT_ROUND_DIGITS, DEFAULT_TOP_N

# =============================================================================
# Inputs
# =============================================================================


class SeriesConfig(BaseModel):
    """One measurement series file.

    Attributes:
        path: Distance time-series file (header + ``frame value`` rows)
        label: Column name; defaults to the name in the file header
    """

    path: Path
    label: Optional[str] = None


class ClustersConfig(BaseModel):
    """External clustering output.

    Attributes:
        summary: Clustering summary file (one row per cluster)
        assignments: Optional per-frame assignment file
    """

    summary: Path
    assignments: Optional[Path] = None


# =============================================================================
# Scoring and Output
# =============================================================================


class ScoringConfig(BaseModel):
    """Composite score settings.

    Attributes:
        combination: Registered combination policy name ("sum" or "max")
        weights: Per-series weights keyed by label; unlisted series weigh 1.0
    """

    combination: str = DEFAULT_COMBINATION
    weights: Dict[str, float] = Field(default_factory=dict)

    @field_validator("combination")
    @classmethod
    def validate_combination(cls, v: str) -> str:
        """Validate that the policy is registered."""
        from mechframe.core.scoring import CombinationPolicyRegistry

        available = CombinationPolicyRegistry.list_available()
        if v not in available:
            raise ValueError(f"Unknown combination '{v}'. Available: {available}")
        return v

    @field_validator("weights")
    @classmethod
    def validate_weights(cls, v: Dict[str, float]) -> Dict[str, float]:
        """Validate that weights are non-negative."""
        for name, w in v.items():
            if w < 0:
                raise ValueError(f"Weight for '{name}' must be >= 0, got {w}")
        return v


class OutputConfig(BaseModel):
    """Output locations and display settings.

    Attributes:
        merged_table: Where to write the aligned ``Frame <series...>`` table
        report: Where to write the JSON report
        round_digits: Decimal digits for displaying DMCS
        top_n: Number of top-ranked frames listed in the report
        float_format: printf-style format for merged table values
    """

    merged_table: Optional[Path] = None
    report: Optional[Path] = None
    round_digits: int = Field(default=DEFAULT_ROUND_DIGITS, ge=0)
    top_n: int = Field(default=DEFAULT_TOP_N, ge=1)
    float_format: str = "%.4f"

    @field_validator("float_format")
    @classmethod
    def validate_float_format(cls, v: str) -> str:
        """Validate that the format renders a float."""
        try:
            v % 1.0
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid float_format '{v}': {e}") from None
        return v


# =============================================================================
# Main Configuration
# =============================================================================


class RankingConfig(BaseModel):
    """Complete configuration of a frame ranking run.

    Attributes:
        name: Run name, carried into reports
        series: Measurement series, in column order
        scoring: Composite score settings
        clusters: Clustering output to reconcile against (optional)
        output: Output settings

    Example:
        >>> config = RankingConfig.from_yaml("mechframe.yaml")
        >>> [s.label for s in config.series]
        ['Lys_PLP', 'PLP_UNI', 'PLP_UNL']
    """

    name: str = "mechframe"
    series: List[SeriesConfig] = Field(..., min_length=1)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    clusters: Optional[ClustersConfig] = None
    output: OutputConfig = Field(default_factory=OutputConfig)

    @model_validator(mode="after")
    def validate_labels(self) -> "RankingConfig":
        """Explicit labels must be unique and cover every weighted series."""
        labels = [s.label for s in self.series if s.label is not None]
        duplicates = sorted({lbl for lbl in labels if labels.count(lbl) > 1})
        if duplicates:
            raise ValueError(f"Duplicate series labels: {duplicates}")

        # Weights for unlabeled series are checked once headers are read
        if len(labels) == len(self.series):
            unknown = sorted(set(self.scoring.weights) - set(labels))
            if unknown:
                raise ValueError(f"Weights given for unknown series: {unknown}")
        return self

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "RankingConfig":
        """Load configuration from a YAML file.

        Args:
            path: Path to the YAML configuration file

        Returns:
            RankingConfig instance

        Raises:
            FileNotFoundError: If file doesn't exist
            ValidationError: If configuration is invalid
        """
        from mechframe.config.loader import load_config

        return load_config(path)

    def to_yaml(self, path: Union[str, Path]) -> None:
        """Save configuration to a YAML file.

        Args:
            path: Path to save the configuration file
        """
        from mechframe.config.loader import save_config

        save_config(self, path)

    def validate_config(self) -> List[str]:
        """Check the configuration against the filesystem.

        Returns:
            List of problems (empty if the run can start)
        """
        issues = []
        for s in self.series:
            if not s.path.exists():
                issues.append(f"Series file not found: {s.path}")
        if self.clusters is not None:
            if not self.clusters.summary.exists():
                issues.append(f"Cluster summary not found: {self.clusters.summary}")
            if self.clusters.assignments is not None and not self.clusters.assignments.exists():
                issues.append(f"Cluster assignments not found: {self.clusters.assignments}")
        return issues

    def compute_hash(self) -> str:
        """Hash of the settings that affect the result.

        Returns:
            First 16 hex characters of the SHA-256 digest
        """
        hash_data = {
            "series": [{"path": str(s.path), "label": s.label} for s in self.series],
            "scoring": self.scoring.model_dump(),
            "clusters": self.clusters.model_dump(mode="json") if self.clusters else None,
        }
        json_str = json.dumps(hash_data, sort_keys=True, default=str)
        return hashlib.sha256(json_str.encode()).hexdigest()[:16]


def generate_config_template(name: str = "mechframe") -> str:
    """Generate a commented template configuration.

    Args:
        name: Run name written into the template

    Returns:
        YAML template content
    """
    return f'''\
# ============================================================================
# MechFrame Run Configuration
# ============================================================================
# Ranks trajectory frames by combined catalytic distances, computes the
# Dynamic Mechanistic Compatibility Score (DMCS), and reconciles the best
# frame with an external clustering.
#
# Run: mechframe run -c mechframe.yaml
# Relative paths are resolved against this file's directory.
# ============================================================================

name: "{name}"

# Distance time series (header line + "frame value" rows), in column order
series:
  - label: "Lys_PLP"
    path: "dist_lys_plp.dat"
  - label: "PLP_UNI"
    path: "dist_plp_uni.dat"
  - label: "PLP_UNL"
    path: "dist_plp_unl.dat"

# Composite score: "sum" (default) or "max"; unlisted series weigh 1.0
scoring:
  combination: "sum"
  # weights:
  #   Lys_PLP: 2.0

# Clustering output (e.g. cpptraj cluster summary + per-frame assignments)
clusters:
  summary: "cluster_summary.dat"
  assignments: "cluster.dat"  # required unless the summary has a Members column

output:
  merged_table: "plp_all_dist.dat"
  report: "dmcs_report.json"
  round_digits: {DEFAULT_ROUND_DIGITS}
  top_n: {DEFAULT_TOP_N}
'''
