"""Clustering summary parsing.

Structural clustering is performed by an external tool (e.g. ``cpptraj
cluster hieragglo``). This module reads its textual output into
:class:`ClusterRecord` objects and validates it before any reconciliation
is attempted.

Two inputs are supported:

Summary file
    Header line naming the columns, one row per cluster. Columns are matched
    by name (case-insensitive, leading ``#`` ignored), so their order does
    not matter. cpptraj's ``summary`` output works as-is::

        #Cluster   Frames     Frac  AvgDist    Stdev Centroid AvgCDist
               0      412    0.412    1.532    0.211      377    2.906
               1      301    0.301    1.611    0.198      129    2.713

    A tool that lists members directly may use a ``Members`` column holding
    comma-separated frame indices and inclusive ranges (``1-5,9,12-14``).

Assignment file (optional)
    Per-frame cluster ids as written by cpptraj's ``out`` option
    (``#Frame Cluster``). Frames assigned to cluster -1 are noise and belong
    to no cluster. Supplies members when the summary has no member column.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, Sequence

from mechframe.constants import NOISE_CLUSTER_ID
from mechframe.exceptions import InconsistentClusterSummary

LOGGER = logging.getLogger(__name__)

# Accepted header names per logical column
COLUMN_ALIASES: dict[str, tuple[str, ...]] = {
    "cluster_id": ("cluster", "cluster_id", "clusterid", "id"),
    "representative": ("representative", "rep", "rep_frame", "centroid"),
    "members": ("members", "member_frames", "frames_list"),
    "population": ("population", "pop", "frames", "size", "count"),
}


@dataclass(frozen=True)
class ClusterRecord:
    """One structural cluster.

    Attributes
    ----------
    cluster_id : int
        Cluster identifier as written by the clustering tool
    members : tuple[int, ...]
        Member frame indices, ascending
    representative : int
        Frame chosen by the clustering tool to represent the cluster
    population : int
        Number of frames in the cluster
    """

    cluster_id: int
    members: tuple[int, ...]
    representative: int
    population: int | None = None

    def __post_init__(self) -> None:
        members = tuple(sorted(self.members))
        if len(set(members)) != len(members):
            raise InconsistentClusterSummary(
                "member list contains duplicate frames", cluster_id=self.cluster_id
            )
        if self.representative not in members:
            raise InconsistentClusterSummary(
                f"representative frame {self.representative} is not a member",
                cluster_id=self.cluster_id,
            )
        object.__setattr__(self, "members", members)
        if self.population is None:
            object.__setattr__(self, "population", len(members))

    def __contains__(self, frame: object) -> bool:
        return frame in self.members


class ClusterTable:
    """Validated collection of cluster records.

    Parameters
    ----------
    records : sequence of ClusterRecord
        Clusters in file order
    source : str, optional
        Where the records came from, used in error messages
    warnings : sequence of str, optional
        Non-fatal problems found while reading the records

    Raises
    ------
    InconsistentClusterSummary
        If there are no clusters, a cluster id repeats, or a frame belongs
        to more than one cluster
    """

    def __init__(
        self,
        records: Sequence[ClusterRecord],
        source: str | None = None,
        warnings: Sequence[str] = (),
    ) -> None:
        self.source = source
        self.warnings = list(warnings)
        if not records:
            raise InconsistentClusterSummary("summary contains no clusters", source=source)

        self._records = list(records)
        self._by_id: dict[int, ClusterRecord] = {}
        self._frame_index: dict[int, int] = {}

        for rec in self._records:
            if rec.cluster_id in self._by_id:
                raise InconsistentClusterSummary(
                    "cluster id appears more than once", cluster_id=rec.cluster_id, source=source
                )
            self._by_id[rec.cluster_id] = rec
            for frame in rec.members:
                if frame in self._frame_index:
                    raise InconsistentClusterSummary(
                        f"frame {frame} is also a member of cluster {self._frame_index[frame]}",
                        cluster_id=rec.cluster_id,
                        source=source,
                    )
                self._frame_index[frame] = rec.cluster_id

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[ClusterRecord]:
        return iter(self._records)

    @property
    def records(self) -> list[ClusterRecord]:
        return list(self._records)

    def get(self, cluster_id: int) -> ClusterRecord:
        try:
            return self._by_id[cluster_id]
        except KeyError:
            raise KeyError(f"No cluster with id {cluster_id}") from None

    def cluster_of(self, frame: int) -> ClusterRecord | None:
        """Cluster containing ``frame``, or None if the frame is unassigned."""
        cluster_id = self._frame_index.get(int(frame))
        if cluster_id is None:
            return None
        return self._by_id[cluster_id]

    def dominant(self) -> ClusterRecord:
        """Most populous cluster; the lowest cluster id wins ties."""
        return min(self._records, key=lambda r: (-r.population, r.cluster_id))

    @property
    def covered_frames(self) -> frozenset[int]:
        return frozenset(self._frame_index)

    def uncovered(self, frames: Iterable[int]) -> list[int]:
        """Frames from ``frames`` that belong to no cluster, ascending."""
        return sorted(int(f) for f in frames if int(f) not in self._frame_index)


# ============================================================================
# Parsing helpers
# ============================================================================


def parse_frame_list(text: str) -> list[int]:
    """Parse a member list such as ``"1-5,9,12-14"``.

    Examples
    --------
    >>> parse_frame_list("1-3,7")
    [1, 2, 3, 7]
    """
    frames: list[int] = []
    for part in text.split(","):
        part = part.strip()
        if not part:
            continue
        if "-" in part:
            start, end = part.split("-", 1)
            lo, hi = int(start), int(end)
            if hi < lo:
                raise ValueError(f"Invalid frame range '{part}'")
            frames.extend(range(lo, hi + 1))
        else:
            frames.append(int(part))
    return frames


def _resolve_columns(header: Sequence[str], source: str) -> dict[str, int]:
    lowered = [h.lower() for h in header]
    columns: dict[str, int] = {}
    for key, aliases in COLUMN_ALIASES.items():
        for alias in aliases:
            if alias in lowered:
                columns[key] = lowered.index(alias)
                break

    for required in ("cluster_id", "representative"):
        if required not in columns:
            raise InconsistentClusterSummary(
                f"header has no {required} column (accepted names: "
                f"{', '.join(COLUMN_ALIASES[required])})",
                source=source,
            )
    return columns


def read_cluster_assignments(path: str | Path) -> dict[int, list[int]]:
    """Read per-frame cluster assignments.

    Parameters
    ----------
    path : str or Path
        File with a header line and ``<frame> <cluster_id>`` rows

    Returns
    -------
    dict[int, list[int]]
        Member frames per cluster id, noise frames excluded
    """
    path = Path(path)
    source = str(path)
    members: dict[int, list[int]] = defaultdict(list)
    n_noise = 0

    with open(path) as f:
        lines = f.readlines()

    for line_number, line in enumerate(lines[1:], start=2):
        tokens = line.split()
        if not tokens:
            continue
        if len(tokens) != 2:
            raise InconsistentClusterSummary(
                f"line {line_number}: expected '<frame> <cluster>', got {line.strip()!r}",
                source=source,
            )
        try:
            frame, cluster_id = int(tokens[0]), int(tokens[1])
        except ValueError:
            raise InconsistentClusterSummary(
                f"line {line_number}: non-integer frame or cluster id", source=source
            ) from None
        if frame < 1:
            raise InconsistentClusterSummary(
                f"line {line_number}: frame index must be >= 1, got {frame}", source=source
            )

        if cluster_id == NOISE_CLUSTER_ID:
            n_noise += 1
            continue
        members[cluster_id].append(frame)

    if n_noise:
        LOGGER.info(f"{n_noise} frames in {path.name} are unassigned (noise)")
    return dict(members)


class ClusterSummaryReader:
    """Read an external clustering summary into a :class:`ClusterTable`.

    Parameters
    ----------
    summary : str or Path
        Clustering summary file
    assignments : str or Path, optional
        Per-frame assignment file. Required when the summary has no
        member column; cross-checked against it otherwise.

    Examples
    --------
    >>> reader = ClusterSummaryReader("cluster_summary.dat", assignments="cluster.dat")
    >>> clusters = reader.read()
    >>> clusters.dominant().representative
    377
    """

    def __init__(self, summary: str | Path, assignments: str | Path | None = None) -> None:
        self.summary = Path(summary)
        self.assignments = Path(assignments) if assignments is not None else None

    def read(self) -> ClusterTable:
        """Parse and validate the summary.

        Raises
        ------
        InconsistentClusterSummary
            On missing columns, unparseable rows, missing member information,
            representatives outside their cluster, or overlapping clusters
        """
        source = str(self.summary)
        with open(self.summary) as f:
            lines = f.readlines()

        if not lines:
            raise InconsistentClusterSummary("file is empty", source=source)

        header = lines[0].strip().lstrip("#").split()
        columns = _resolve_columns(header, source)

        assigned = None
        if self.assignments is not None:
            assigned = read_cluster_assignments(self.assignments)
        if "members" not in columns and assigned is None:
            raise InconsistentClusterSummary(
                "no member information: add a members column or pass an assignment file",
                source=source,
            )

        records = []
        warnings: list[str] = []
        for line_number, line in enumerate(lines[1:], start=2):
            tokens = line.split()
            if not tokens:
                continue
            if len(tokens) != len(header):
                raise InconsistentClusterSummary(
                    f"line {line_number}: expected {len(header)} columns, found {len(tokens)}",
                    source=source,
                )
            try:
                cluster_id = int(tokens[columns["cluster_id"]])
                representative = int(tokens[columns["representative"]])
                population = (
                    int(tokens[columns["population"]]) if "population" in columns else None
                )
                listed = (
                    parse_frame_list(tokens[columns["members"]]) if "members" in columns else None
                )
            except ValueError as e:
                raise InconsistentClusterSummary(
                    f"line {line_number}: {e}", source=source
                ) from None

            if population is not None and population < 1:
                raise InconsistentClusterSummary(
                    f"line {line_number}: population must be >= 1, got {population}",
                    cluster_id=cluster_id,
                    source=source,
                )

            members = self._merge_members(cluster_id, listed, assigned, source)

            if population is not None and population != len(members):
                msg = (
                    f"Cluster {cluster_id}: declared population {population} "
                    f"differs from {len(members)} listed members"
                )
                LOGGER.warning(msg)
                warnings.append(msg)

            records.append(
                ClusterRecord(
                    cluster_id=cluster_id,
                    members=tuple(members),
                    representative=representative,
                    population=population if population is not None else len(members),
                )
            )

        if assigned is not None:
            extra = sorted(set(assigned) - {r.cluster_id for r in records})
            if extra:
                raise InconsistentClusterSummary(
                    f"assignment file uses cluster ids {extra} absent from the summary",
                    source=source,
                )

        table = ClusterTable(records, source=source, warnings=warnings)
        LOGGER.info(
            f"Read {len(table)} clusters covering {len(table.covered_frames)} frames "
            f"from {self.summary.name}"
        )
        return table

    @staticmethod
    def _merge_members(
        cluster_id: int,
        listed: list[int] | None,
        assigned: dict[int, list[int]] | None,
        source: str,
    ) -> list[int]:
        if assigned is None:
            return listed or []
        from_assignments = assigned.get(cluster_id, [])
        if listed is not None and sorted(listed) != sorted(from_assignments):
            raise InconsistentClusterSummary(
                "member list disagrees with the assignment file",
                cluster_id=cluster_id,
                source=source,
            )
        return from_assignments
