"""Configuration management with YAML support and validation."""

from mechframe.config.loader import load_config, load_config_dict, save_config
from mechframe.config.schema import (
    ClustersConfig,
    OutputConfig,
    RankingConfig,
    ScoringConfig,
    SeriesConfig,
    generate_config_template,
)

__all__ = [
    "RankingConfig",
    "SeriesConfig",
    "ScoringConfig",
    "ClustersConfig",
    "OutputConfig",
    "generate_config_template",
    "load_config",
    "load_config_dict",
    "save_config",
]
