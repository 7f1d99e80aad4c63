"""Base classes for ranking results.

All result types inherit from BaseAnalysisResult, which provides:
- JSON serialization/deserialization
- Standard metadata fields (timestamp, version, config hash)

Design Principles
-----------------
1. Results are immutable after creation
2. Results can be saved/loaded from JSON
3. Timestamps and versions are tracked for reproducibility
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import ClassVar, Self

from pydantic import BaseModel, Field


class BaseAnalysisResult(BaseModel, ABC):
    """Base class for all result types.

    Subclasses get ``save()`` and ``load()`` for free: ``save()`` writes the
    model to JSON via ``model_dump(mode="json")`` and ``load()`` rebuilds it
    with ``model_validate()``. Fields must therefore be JSON-serializable;
    convert NumPy arrays and scalars to plain Python values before
    constructing a result.

    Subclasses set ``analysis_type`` as a ``ClassVar[str]`` and implement
    ``summary()``, a human-readable block for logs and CLI output.

    Attributes
    ----------
    analysis_type : str
        Type of result (e.g., "frame_scoring", "reconciliation")
    name : str
        Run name from the configuration
    config_hash : str
        Hash of the run configuration. Defaults to ``"unknown"`` for runs
        assembled from command-line arguments.
    created_at : datetime
        Timestamp when the result was created
    mechframe_version : str
        Version of MechFrame used
    """

    analysis_type: ClassVar[str] = "base"

    name: str = Field(default="mechframe", description="Run name")
    config_hash: str = Field(
        default="unknown",
        description="SHA-256 hash of the run configuration",
    )
    created_at: datetime = Field(
        default_factory=datetime.now, description="Timestamp of result creation"
    )
    mechframe_version: str = Field(default="unknown", description="MechFrame version used")

    model_config = {"extra": "forbid", "frozen": True}

    @classmethod
    def get_analysis_type(cls) -> str:
        """Get the analysis type for this result class."""
        return cls.analysis_type

    def save(self, filepath: str | Path) -> Path:
        """Save result to JSON file.

        Parameters
        ----------
        filepath : str or Path
            Output file path. Parent directories will be created.

        Returns
        -------
        Path
            Path to saved file
        """
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        with open(filepath, "w") as f:
            json.dump(self.model_dump(mode="json"), f, indent=2, default=str)

        return filepath

    @classmethod
    def load(cls, filepath: str | Path) -> Self:
        """Load result from JSON file.

        Parameters
        ----------
        filepath : str or Path
            Path to JSON file

        Returns
        -------
        Self
            Loaded result instance
        """
        filepath = Path(filepath)
        with open(filepath) as f:
            data = json.load(f)

        return cls.model_validate(data)

    @abstractmethod
    def summary(self) -> str:
        """Return a human-readable summary of the result."""
        pass


def get_mechframe_version() -> str:
    """Get current MechFrame version."""
    from importlib.metadata import PackageNotFoundError, version

    try:
        return version("mechframe")
    except PackageNotFoundError:
        return "unknown"
