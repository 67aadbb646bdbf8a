"""
Data models for stepwise clustering.

Defines the point/centroid records and the ClusterState pair that every
iteration reads and produces.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Optional


# Prefix for auto-assigned point names ("p1", "p2", ...)
POINT_NAME_PREFIX = "p"


@dataclass(frozen=True)
class Point:
    """A labeled 2-D point."""

    x: float
    y: float
    name: str                       # e.g., "p3", stable once assigned
    cluster: Optional[int] = None   # Index into current centroids, None = unassigned

    def with_cluster(self, cluster: Optional[int]) -> Point:
        """Return a copy carrying a new cluster label."""
        return replace(self, cluster=cluster)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "x": self.x,
            "y": self.y,
            "cluster": self.cluster,
        }


@dataclass(frozen=True)
class Centroid:
    """Representative position of a cluster."""

    x: float
    y: float

    @classmethod
    def of(cls, point: Point) -> Centroid:
        """Copy a point's coordinates (no link back to the point)."""
        return cls(x=point.x, y=point.y)

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class ClusterState:
    """
    Points plus centroids at one moment.

    Centroid index i is cluster label i. The ordering of both sequences is
    significant and is never changed by an iteration.
    """

    points: tuple[Point, ...] = field(default_factory=tuple)
    centroids: tuple[Centroid, ...] = field(default_factory=tuple)

    def cluster_sizes(self) -> list[int]:
        """Number of points assigned to each centroid index."""
        sizes = [0] * len(self.centroids)
        for p in self.points:
            if p.cluster is not None:
                sizes[p.cluster] += 1
        return sizes

    def members(self, cluster: int) -> list[Point]:
        """Points currently labeled with the given cluster index."""
        return [p for p in self.points if p.cluster == cluster]

    def without_labels(self) -> ClusterState:
        """Same points and centroids, every cluster label cleared."""
        return ClusterState(
            points=tuple(p.with_cluster(None) for p in self.points),
            centroids=self.centroids,
        )

    def copy(self) -> ClusterState:
        """Deep copy (records are frozen, so fresh tuples suffice)."""
        return ClusterState(points=tuple(self.points), centroids=tuple(self.centroids))

