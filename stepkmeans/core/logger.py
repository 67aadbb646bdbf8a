"""
Structured event log for clustering sessions.

Single JSONL file with typed events for replay and analysis.

Event types:
- session_start: Config
- point_added: Name and coordinates
- initialize: k, seed centroids, colors
- step: Iteration, labels, centroids, shifts, convergence
- revert: Restored iteration, history depth
- reset: Session cleared
- error: Rejected operations
"""

import json
from pathlib import Path
from datetime import datetime
from typing import Any, Optional


class EventLog:
    def __init__(self, output_dir: Path):
        """
        Initialize event log.

        Args:
            output_dir: Directory for the log file (created if missing)
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.log_file = self.output_dir / "events.jsonl"

        # Open file in append mode
        self.file_handle = open(self.log_file, 'a')

    def _write_event(self, event_type: str, data: dict[str, Any]) -> None:
        """Write typed event to JSONL log."""
        event = {
            "type": event_type,
            "timestamp": datetime.now().isoformat(),
            **data
        }
        self.file_handle.write(json.dumps(event) + '\n')
        self.file_handle.flush()

    def log_session_start(self, config: dict[str, Any]) -> None:
        self._write_event("session_start", {"config": config})

    def log_point_added(self, name: str, x: float, y: float, num_points: int) -> None:
        self._write_event("point_added", {
            "name": name,
            "x": x,
            "y": y,
            "num_points": num_points,
        })

    def log_initialize(self, k: int, centroids: list[dict], colors: list[str]) -> None:
        """
        Log centroid seeding.

        Args:
            k: Number of clusters
            centroids: Seed centroid coordinates
            colors: Display color per cluster index
        """
        self._write_event("initialize", {
            "k": k,
            "centroids": centroids,
            "colors": colors,
        })

    def log_step(
        self,
        iteration: int,
        labels: list[int],
        centroids: list[dict],
        shifts: list[list[float]],
        converged: bool,
    ) -> None:
        """
        Log one completed iteration.

        Args:
            iteration: Iteration count after the step
            labels: Cluster label per point, in point order
            centroids: Centroid coordinates after the update
            shifts: Per-centroid [|dx|, |dy|]
            converged: Whether this step converged
        """
        self._write_event("step", {
            "iteration": iteration,
            "labels": labels,
            "centroids": centroids,
            "shifts": shifts,
            "converged": converged,
        })

    def log_revert(self, iteration: int, history_depth: int) -> None:
        self._write_event("revert", {
            "iteration": iteration,
            "history_depth": history_depth,
        })

    def log_reset(self) -> None:
        self._write_event("reset", {})

    def log_error(
        self,
        message: str,
        operation: Optional[str] = None,
        error_type: str = "error",
    ) -> None:
        """
        Log a rejected operation.

        Args:
            message: Error description
            operation: Operation that failed (initialize, step, ...)
            error_type: Error category (error, not_ready)
        """
        data = {
            "message": message,
            "error_type": error_type,
        }
        if operation is not None:
            data["operation"] = operation

        self._write_event("error", data)

    def close(self) -> None:
        """Close log file."""
        if hasattr(self, 'file_handle') and self.file_handle:
            self.file_handle.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def read_events(log_file: Path) -> list[dict]:
    """Load all events from a JSONL log."""
    events = []
    with open(log_file) as f:
        for line in f:
            line = line.strip()
            if line:
                events.append(json.loads(line))
    return events
