"""
Configuration for stepwise K-Means sessions.
"""

import math
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Optional

import yaml

from .clustering.algorithm import DEFAULT_CONVERGENCE_TOL
from .core.errors import ConfigError

__all__ = [
    "KMeansConfig",
    "PlotBounds",
    "DEFAULT_K",
    "MAX_K",
    "load_config",
    "save_config",
    "load_points",
]

DEFAULT_K = 2
MAX_K = 10  # Upper limit offered by the k input


@dataclass
class PlotBounds:
    """Drawing domain and the range accepted for new points."""

    # Visible axes
    x_max: float = 13.0
    y_max: float = 10.0

    # Clicks outside this box are ignored
    input_x_max: float = 10.0
    input_y_max: float = 10.0

    def contains(self, x: float, y: float) -> bool:
        """Check if (x, y) is inside the accepted input range."""
        return 0 <= x <= self.input_x_max and 0 <= y <= self.input_y_max

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "PlotBounds":
        valid_keys = {f.name for f in cls.__dataclass_fields__.values()}
        return cls(**{k: v for k, v in data.items() if k in valid_keys})


@dataclass
class KMeansConfig:
    """Configuration for a clustering session."""

    # Clustering
    k: int = DEFAULT_K
    max_k: int = MAX_K
    convergence_tol: float = DEFAULT_CONVERGENCE_TOL
    seed: Optional[int] = None  # RNG seed for centroid sampling and colors

    # Input / display
    plot: PlotBounds = field(default_factory=PlotBounds)
    round_input: bool = True  # Snap entered coordinates to integers

    # Output
    log_dir: Optional[str] = None  # JSONL event log directory, None = no log
    verbose: bool = True

    def validate(self) -> "KMeansConfig":
        """Check value ranges, raising ConfigError on the first problem."""
        if isinstance(self.k, bool) or not isinstance(self.k, int) or self.k < 1:
            raise ConfigError(f"k must be a positive integer, got {self.k!r}")
        if isinstance(self.max_k, bool) or not isinstance(self.max_k, int) or self.max_k < 1:
            raise ConfigError(f"max_k must be a positive integer, got {self.max_k!r}")
        if self.k > self.max_k:
            raise ConfigError(f"k ({self.k}) exceeds max_k ({self.max_k})")
        if not (isinstance(self.convergence_tol, (int, float)) and self.convergence_tol > 0):
            raise ConfigError(f"convergence_tol must be > 0, got {self.convergence_tol!r}")
        if self.seed is not None and (isinstance(self.seed, bool) or not isinstance(self.seed, int)):
            raise ConfigError(f"seed must be an integer or null, got {self.seed!r}")

        plot = self.plot
        for name in ("x_max", "y_max", "input_x_max", "input_y_max"):
            value = getattr(plot, name)
            if not isinstance(value, (int, float)) or not math.isfinite(value) or value <= 0:
                raise ConfigError(f"plot.{name} must be a positive number, got {value!r}")
        return self

    def to_dict(self) -> dict:
        """Convert to JSON/YAML-serializable dict."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "KMeansConfig":
        """Create from dict, filtering out unknown keys."""
        valid_keys = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        if isinstance(filtered.get("plot"), dict):
            filtered["plot"] = PlotBounds.from_dict(filtered["plot"])
        return cls(**filtered)


def load_config(path: Path) -> KMeansConfig:
    """
    Load config from a YAML file, merging with defaults.

    Args:
        path: YAML file with any subset of KMeansConfig fields

    Returns:
        Validated KMeansConfig

    Raises:
        ConfigError: If the file is missing, malformed or has bad values
    """
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config must be a mapping, got {type(data).__name__}")

    try:
        config = KMeansConfig.from_dict(data)
    except TypeError as e:
        raise ConfigError(f"Invalid config in {path}: {e}") from e
    return config.validate()


def save_config(config: KMeansConfig, path: Path) -> None:
    """Write config as YAML."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        yaml.safe_dump(config.to_dict(), f, default_flow_style=False)


def load_points(path: Path) -> list[tuple[float, float]]:
    """
    Load point coordinates from YAML (JSON also parses).

    Accepts either a list or a mapping with a "points" list; each entry is
    an [x, y] pair or an {x, y} mapping.
    """
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Points file not found: {path}")

    try:
        with open(path) as f:
            data = yaml.safe_load(f) or []
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if isinstance(data, dict):
        data = data.get("points", [])
    if not isinstance(data, list):
        raise ConfigError(f"Expected a list of points in {path}")

    coords = []
    for i, entry in enumerate(data):
        try:
            if isinstance(entry, dict):
                x, y = entry["x"], entry["y"]
            else:
                x, y = entry
            coords.append((float(x), float(y)))
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigError(f"Bad point #{i} in {path}: {entry!r}") from e
    return coords
