"""
Clustering engine core: state store, undo history and iteration controller.
"""

from .errors import KMeansError, InvalidParameter, NotReady, ConfigError
from .history import Snapshot, History
from .store import ClusterStore, EngineView, Phase
from .controller import IterationController, StepResult
from .logger import EventLog, read_events

__all__ = [
    "KMeansError",
    "InvalidParameter",
    "NotReady",
    "ConfigError",
    "Snapshot",
    "History",
    "ClusterStore",
    "EngineView",
    "Phase",
    "IterationController",
    "StepResult",
    "EventLog",
    "read_events",
]
