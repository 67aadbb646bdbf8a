"""
Iteration controller for stepwise K-Means.

Runs initialize / step / revert as transactions over a ClusterStore.
Each step computes the next state off to the side, pushes the pre-step
snapshot onto history, then installs the new state in a single replace.
"""

from __future__ import annotations

import numbers
import random
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from ..clustering.algorithm import (
    DEFAULT_CONVERGENCE_TOL,
    lloyd_iteration,
    sample_initial_centroids,
    generate_colors,
)
from ..clustering.models import Point, ClusterState
from .errors import InvalidParameter, NotReady
from .history import Snapshot
from .logger import EventLog
from .store import ClusterStore, EngineView, Phase

if TYPE_CHECKING:
    from ..config import KMeansConfig


@dataclass(frozen=True)
class StepResult:
    """Summary of one applied iteration."""

    iteration: int                              # Iteration count after the step
    converged: bool
    labels: tuple[int, ...]                     # Cluster per point, in point order
    shifts: tuple[tuple[float, float], ...]     # Per-centroid (|dx|, |dy|)
    cluster_sizes: tuple[int, ...]

    @property
    def max_shift(self) -> float:
        return max((max(dx, dy) for dx, dy in self.shifts), default=0.0)


class IterationController:
    """
    Drives the clustering of one session.

    State machine:
        EMPTY -(add_point)-> SEEDABLE -(initialize)-> READY -(step)-> READY | CONVERGED
        revert: READY/CONVERGED -> READY
        reset: any -> EMPTY

    step() and revert() are no-ops returning None when not allowed; pass
    strict=True to get NotReady instead.
    """

    def __init__(
        self,
        store: Optional[ClusterStore] = None,
        tol: float = DEFAULT_CONVERGENCE_TOL,
        rng: Optional[random.Random] = None,
        event_log: Optional[EventLog] = None,
    ):
        self.store = store if store is not None else ClusterStore()
        self.tol = tol
        self.rng = rng or random.Random()
        self.event_log = event_log

    @classmethod
    def from_config(
        cls,
        config: KMeansConfig,
        store: Optional[ClusterStore] = None,
        event_log: Optional[EventLog] = None,
    ) -> IterationController:
        """Build a controller using the tolerance and RNG seed from config."""
        controller = cls(
            store=store,
            tol=config.convergence_tol,
            rng=random.Random(config.seed),
            event_log=event_log,
        )
        if event_log is not None:
            event_log.log_session_start(config.to_dict())
        return controller

    @property
    def phase(self) -> Phase:
        return self.store.phase

    def view(self) -> EngineView:
        return self.store.view()

    def add_point(self, x: float, y: float) -> Point:
        """Feed a new point into the store."""
        try:
            point = self.store.add_point(x, y)
        except InvalidParameter as e:
            self._log_error(str(e), "add_point")
            raise

        if self.event_log:
            self.event_log.log_point_added(point.name, point.x, point.y, len(self.store.points))
        return point

    def initialize(self, k: int) -> list[str]:
        """
        Seed k centroids from k distinct points chosen uniformly at random.

        Clears all cluster labels, history, the iteration count and the
        converged flag.

        Args:
            k: Number of clusters, 1 <= k <= number of points

        Returns:
            The generated display colors, one per cluster index

        Raises:
            InvalidParameter: If k is not an integer in range (nothing changes)
        """
        points = self.store.points
        if isinstance(k, bool) or not isinstance(k, numbers.Integral):
            self._log_error(f"k must be an integer, got {k!r}", "initialize")
            raise InvalidParameter(f"k must be an integer, got {k!r}")
        k = int(k)
        if k < 1:
            self._log_error(f"k must be >= 1, got {k}", "initialize")
            raise InvalidParameter(f"k must be >= 1, got {k}")
        if len(points) < k:
            message = f"Not enough points to seed {k} centroids (have {len(points)})"
            self._log_error(message, "initialize")
            raise InvalidParameter(message)

        centroids = sample_initial_centroids(points, k, self.rng)
        colors = generate_colors(k, self.rng)
        state = ClusterState(points=points, centroids=tuple(centroids)).without_labels()
        self.store.seed(state, k=k, colors=colors)

        if self.event_log:
            self.event_log.log_initialize(k, [c.to_dict() for c in centroids], colors)
        return colors

    def step(self, strict: bool = False) -> Optional[StepResult]:
        """
        Run one Lloyd iteration.

        Returns:
            StepResult, or None when there are no centroids or the session
            has already converged

        Raises:
            NotReady: Instead of returning None, when strict
        """
        store = self.store
        if not store.centroids:
            return self._not_ready("No centroids: initialize first", "step", strict)
        if store.converged:
            return self._not_ready("Already converged", "step", strict)

        before = store.get_state()
        outcome = lloyd_iteration(before, self.tol)
        iteration = store.iteration_count + 1

        store.history.push(Snapshot.capture(before, store.iteration_count))
        store.replace_state(
            outcome.state,
            iteration_count=iteration,
            converged=outcome.converged,
        )

        result = StepResult(
            iteration=iteration,
            converged=outcome.converged,
            labels=outcome.labels,
            shifts=outcome.shifts,
            cluster_sizes=tuple(outcome.state.cluster_sizes()),
        )

        if self.event_log:
            self.event_log.log_step(
                iteration=iteration,
                labels=list(outcome.labels),
                centroids=[c.to_dict() for c in outcome.state.centroids],
                shifts=[list(s) for s in outcome.shifts],
                converged=outcome.converged,
            )
        return result

    def revert(self, strict: bool = False) -> Optional[Snapshot]:
        """
        Undo the last iteration.

        The restored state is the one a step was taken from, and a step is
        only taken from a non-converged state, so converged is cleared.

        Returns:
            The snapshot that was restored, or None when history is empty

        Raises:
            NotReady: Instead of returning None, when strict
        """
        store = self.store
        snapshot = store.history.peek()
        if snapshot is None:
            return self._not_ready("Nothing to revert", "revert", strict)

        store.replace_state(
            snapshot.state,
            iteration_count=max(0, store.iteration_count - 1),
            converged=False,
        )
        store.history.pop()

        if self.event_log:
            self.event_log.log_revert(store.iteration_count, len(store.history))
        return snapshot

    def reset(self) -> None:
        """Clear everything back to an empty session."""
        self.store.reset()
        if self.event_log:
            self.event_log.log_reset()

    def get_status(self) -> dict:
        """Session status summary."""
        store = self.store
        state = store.get_state()
        return {
            "phase": store.phase.value,
            "num_points": len(state.points),
            "k": store.k,
            "iteration": store.iteration_count,
            "converged": store.converged,
            "history_depth": len(store.history),
            "clusters": [
                {
                    "index": i,
                    "color": store.colors[i] if i < len(store.colors) else None,
                    "centroid": c.to_dict(),
                    "members": [p.name for p in state.members(i)],
                }
                for i, c in enumerate(state.centroids)
            ],
        }

    def _not_ready(self, message: str, operation: str, strict: bool) -> None:
        self._log_error(message, operation, error_type="not_ready")
        if strict:
            raise NotReady(message)
        return None

    def _log_error(self, message: str, operation: str, error_type: str = "error") -> None:
        if self.event_log:
            self.event_log.log_error(message, operation=operation, error_type=error_type)
