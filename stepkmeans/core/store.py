"""
Authoritative state for a clustering session.

ClusterStore owns points, centroids, colors, history and the session flags.
It has no algorithmic logic: the controller computes new states and hands
them over through replace_state()/seed(), which swap everything at once.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..clustering.models import Point, Centroid, ClusterState, POINT_NAME_PREFIX
from .errors import InvalidParameter
from .history import History


class Phase(str, Enum):
    """Lifecycle phase, derived from store contents."""

    EMPTY = "empty"            # No points
    SEEDABLE = "seedable"      # Points, no centroids yet
    READY = "ready"            # Initialized, more steps allowed
    CONVERGED = "converged"    # Initialized and converged


@dataclass(frozen=True)
class EngineView:
    """Read-only picture of the session for rendering."""

    points: tuple[Point, ...]
    centroids: tuple[Centroid, ...]
    colors: tuple[str, ...]
    k: Optional[int]
    iteration: int
    converged: bool
    phase: Phase
    history_depth: int

    @property
    def can_step(self) -> bool:
        return bool(self.centroids) and not self.converged

    @property
    def can_revert(self) -> bool:
        return self.history_depth > 0

    def can_initialize(self, k: int) -> bool:
        return 1 <= k <= len(self.points)

    def color_for(self, point: Point) -> Optional[str]:
        """Display color of a point's cluster (None when unassigned)."""
        if point.cluster is None or point.cluster >= len(self.colors):
            return None
        return self.colors[point.cluster]

    def to_dict(self) -> dict:
        return {
            "points": [p.to_dict() for p in self.points],
            "centroids": [c.to_dict() for c in self.centroids],
            "colors": list(self.colors),
            "k": self.k,
            "iteration": self.iteration,
            "converged": self.converged,
            "phase": self.phase.value,
            "history_depth": self.history_depth,
        }


class ClusterStore:
    """Holds the current ClusterState and session flags for one session."""

    def __init__(self):
        self._state = ClusterState()
        self._next_point_number = 1
        self.colors: list[str] = []
        self.k: Optional[int] = None
        self.iteration_count: int = 0
        self.converged: bool = False
        self.history = History()

    @property
    def points(self) -> tuple[Point, ...]:
        return self._state.points

    @property
    def centroids(self) -> tuple[Centroid, ...]:
        return self._state.centroids

    @property
    def phase(self) -> Phase:
        if self._state.centroids:
            return Phase.CONVERGED if self.converged else Phase.READY
        if self._state.points:
            return Phase.SEEDABLE
        return Phase.EMPTY

    def add_point(self, x: float, y: float) -> Point:
        """
        Append a point with a fresh unique name.

        No range check is done here; clamping to a plot area is the
        caller's business. Centroids are untouched.

        Raises:
            InvalidParameter: If a coordinate is not a finite number
        """
        try:
            fx, fy = float(x), float(y)
        except (TypeError, ValueError) as e:
            raise InvalidParameter(f"Coordinates must be numbers: ({x!r}, {y!r})") from e
        if not (math.isfinite(fx) and math.isfinite(fy)):
            raise InvalidParameter(f"Coordinates must be finite: ({fx}, {fy})")

        point = Point(x=fx, y=fy, name=f"{POINT_NAME_PREFIX}{self._next_point_number}")
        self._next_point_number += 1
        self._state = ClusterState(
            points=self._state.points + (point,),
            centroids=self._state.centroids,
        )
        return point

    def reset(self) -> None:
        """Return to the initial empty state."""
        self._state = ClusterState()
        self._next_point_number = 1
        self.colors = []
        self.k = None
        self.iteration_count = 0
        self.converged = False
        self.history.clear()

    def get_state(self) -> ClusterState:
        """Copy of the current points and centroids."""
        return self._state.copy()

    def replace_state(
        self,
        state: ClusterState,
        *,
        iteration_count: int,
        converged: bool,
    ) -> None:
        """
        Install a new state and flags in one go.

        Validation happens before anything is assigned, so a rejected state
        leaves the store as it was.
        """
        self._check_state(state, self.k)
        if iteration_count < 0:
            raise ValueError(f"iteration_count must be >= 0, got {iteration_count}")

        self._state = state.copy()
        self.iteration_count = iteration_count
        self.converged = converged

    def seed(self, state: ClusterState, *, k: int, colors: list[str]) -> None:
        """Install freshly initialized centroids and colors, clearing history."""
        if len(colors) != k:
            raise ValueError(f"Expected {k} colors, got {len(colors)}")
        self._check_state(state, k)

        self._state = state.copy()
        self.k = k
        self.colors = list(colors)
        self.iteration_count = 0
        self.converged = False
        self.history.clear()

    def view(self) -> EngineView:
        """Read-only snapshot of everything a renderer needs."""
        return EngineView(
            points=self._state.points,
            centroids=self._state.centroids,
            colors=tuple(self.colors),
            k=self.k,
            iteration=self.iteration_count,
            converged=self.converged,
            phase=self.phase,
            history_depth=len(self.history),
        )

    @staticmethod
    def _check_state(state: ClusterState, k: Optional[int]) -> None:
        """Reject states that break the centroid/label invariants."""
        n_centroids = len(state.centroids)
        if n_centroids and k is not None and n_centroids != k:
            raise ValueError(f"Expected {k} centroids, got {n_centroids}")
        for p in state.points:
            if p.cluster is not None and not 0 <= p.cluster < n_centroids:
                raise ValueError(
                    f"Point {p.name} has cluster {p.cluster} outside [0, {n_centroids})"
                )
