"""
stepkmeans - Interactive, steppable K-Means clustering.

Add points, seed k centroids, then advance or undo one Lloyd iteration at
a time.
"""

from .config import KMeansConfig, PlotBounds, load_config, load_points
from .core import (
    ClusterStore,
    IterationController,
    StepResult,
    EngineView,
    Phase,
    EventLog,
    KMeansError,
    InvalidParameter,
    NotReady,
    ConfigError,
)
from .clustering import Point, Centroid, ClusterState

__version__ = "0.1.0"

__all__ = [
    "KMeansConfig",
    "PlotBounds",
    "load_config",
    "load_points",
    "ClusterStore",
    "IterationController",
    "StepResult",
    "EngineView",
    "Phase",
    "EventLog",
    "KMeansError",
    "InvalidParameter",
    "NotReady",
    "ConfigError",
    "Point",
    "Centroid",
    "ClusterState",
]
