"""Shared constants for loaders, scoring and reporting.

Centralizing them here keeps the CLI defaults, the YAML config defaults and
the formatters consistent.
"""

# Decimal digits used when displaying the DMCS scalar.
# Used in: OutputConfig, ReconciliationReport.summary(), formatters, CLI.
DEFAULT_ROUND_DIGITS: int = 3

# Number of top-ranked frames listed in reports.
DEFAULT_TOP_N: int = 5

# Name of the frame-index column in merged tables.
FRAME_COLUMN: str = "Frame"

# Default combination policy for composite scores.
DEFAULT_COMBINATION: str = "sum"

# Default file name written by `mechframe init`.
DEFAULT_CONFIG_NAME: str = "mechframe.yaml"

# Cluster id used by cpptraj for frames assigned to no cluster (noise).
NOISE_CLUSTER_ID: int = -1
