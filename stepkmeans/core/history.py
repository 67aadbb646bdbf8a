"""
Iteration history for clustering sessions.

Snapshots of the full ClusterState taken before each destructive step,
kept on a LIFO stack so the last iteration can be undone.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from ..clustering.models import ClusterState


@dataclass(frozen=True)
class Snapshot:
    """Immutable record of ClusterState at a point in time."""

    state: ClusterState
    iteration: int    # Iteration count when the snapshot was taken
    created_at: str   # ISO format

    @classmethod
    def capture(cls, state: ClusterState, iteration: int) -> Snapshot:
        """Take a snapshot of state (copied, so later changes never leak in)."""
        return cls(
            state=state.copy(),
            iteration=iteration,
            created_at=datetime.now(timezone.utc).isoformat(),
        )


class History:
    """
    LIFO stack of snapshots.

    Grows by one per step and shrinks by one per revert.
    """

    def __init__(self):
        self._snapshots: list[Snapshot] = []

    def push(self, snapshot: Snapshot) -> None:
        self._snapshots.append(snapshot)

    def pop(self) -> Optional[Snapshot]:
        """Remove and return the most recent snapshot (None if empty)."""
        if not self._snapshots:
            return None
        return self._snapshots.pop()

    def peek(self) -> Optional[Snapshot]:
        """Most recent snapshot without removing it."""
        if not self._snapshots:
            return None
        return self._snapshots[-1]

    def clear(self) -> None:
        self._snapshots = []

    def __len__(self) -> int:
        return len(self._snapshots)

