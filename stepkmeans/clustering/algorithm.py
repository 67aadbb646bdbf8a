"""
Clustering algorithms for stepwise K-Means.

Pure functions over ClusterState: seeding, assignment, centroid update and
the convergence test that together make up one Lloyd iteration.
"""

from __future__ import annotations

import colorsys
import random
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from .models import Point, Centroid, ClusterState


# Per-axis centroid shift below which an iteration counts as converged
DEFAULT_CONVERGENCE_TOL = 1e-3

# Hue increment for color generation (golden ratio conjugate)
_GOLDEN_RATIO_CONJUGATE = 0.618033988749895


def euclidean_distance(a: Point | Centroid, b: Point | Centroid) -> float:
    """Compute Euclidean distance between two 2-D positions."""
    return float(np.sqrt((a.x - b.x) ** 2 + (a.y - b.y) ** 2))


def _coords(items: Sequence[Point | Centroid]) -> np.ndarray:
    """Stack positions into an (n, 2) float64 array."""
    if not items:
        return np.empty((0, 2), dtype=np.float64)
    return np.array([(item.x, item.y) for item in items], dtype=np.float64)


def distance_matrix(
    points: Sequence[Point],
    centroids: Sequence[Centroid],
) -> np.ndarray:
    """Distances from every point to every centroid, shape (n_points, k)."""
    p = _coords(points)
    c = _coords(centroids)
    dx = p[:, np.newaxis, 0] - c[np.newaxis, :, 0]
    dy = p[:, np.newaxis, 1] - c[np.newaxis, :, 1]
    return np.sqrt(dx ** 2 + dy ** 2)


def assign_points(
    points: Sequence[Point],
    centroids: Sequence[Centroid],
) -> list[int]:
    """Label every point with the index of its nearest centroid."""
    if not points:
        return []
    distances = distance_matrix(points, centroids)
    # argmin returns the first occurrence, so ties go to the lower index
    return [int(label) for label in np.argmin(distances, axis=1)]


def update_centroids(
    points: Sequence[Point],
    labels: Sequence[int],
    centroids: Sequence[Centroid],
) -> list[Centroid]:
    """
    Recompute each centroid as the mean of its assigned points.

    A centroid with no assigned points is returned unchanged (the same
    object, so its coordinates are exactly equal).
    """
    coords = _coords(points)
    label_array = np.asarray(labels, dtype=np.int64)

    new_centroids = []
    for k, centroid in enumerate(centroids):
        mask = label_array == k
        if not np.any(mask):
            new_centroids.append(centroid)
            continue
        mean = coords[mask].mean(axis=0)
        new_centroids.append(Centroid(x=float(mean[0]), y=float(mean[1])))

    return new_centroids


def centroid_shifts(
    old: Sequence[Centroid],
    new: Sequence[Centroid],
) -> list[tuple[float, float]]:
    """Per-centroid (|dx|, |dy|) between two aligned centroid sequences."""
    if len(old) != len(new):
        raise ValueError(f"Centroid count changed: {len(old)} -> {len(new)}")
    return [(abs(n.x - o.x), abs(n.y - o.y)) for o, n in zip(old, new)]


def has_converged(
    old: Sequence[Centroid],
    new: Sequence[Centroid],
    tol: float = DEFAULT_CONVERGENCE_TOL,
) -> bool:
    """True when every centroid moved less than tol on both axes."""
    return all(dx < tol and dy < tol for dx, dy in centroid_shifts(old, new))


@dataclass(frozen=True)
class IterationOutcome:
    """Result of one Lloyd iteration (state is the post-iteration state)."""

    state: ClusterState
    labels: tuple[int, ...]
    shifts: tuple[tuple[float, float], ...]
    converged: bool


def lloyd_iteration(
    state: ClusterState,
    tol: float = DEFAULT_CONVERGENCE_TOL,
) -> IterationOutcome:
    """
    Run one Lloyd iteration.

    1. Assign every point to its nearest centroid (lowest index on ties)
    2. Move each centroid to the mean of its points (empty ones stay put)
    3. Compare new centroids to old ones per axis against tol

    Args:
        state: Current points and centroids (centroids must be non-empty)
        tol: Per-axis convergence threshold

    Returns:
        IterationOutcome with the new state; the new state is returned even
        when the iteration converged.
    """
    if not state.centroids:
        raise ValueError("Cannot iterate without centroids")

    labels = assign_points(state.points, state.centroids)
    new_points = tuple(p.with_cluster(label) for p, label in zip(state.points, labels))
    new_centroids = tuple(update_centroids(state.points, labels, state.centroids))
    shifts = tuple(centroid_shifts(state.centroids, new_centroids))
    converged = has_converged(state.centroids, new_centroids, tol)

    return IterationOutcome(
        state=ClusterState(points=new_points, centroids=new_centroids),
        labels=tuple(labels),
        shifts=shifts,
        converged=converged,
    )


def sample_initial_centroids(
    points: Sequence[Point],
    k: int,
    rng: Optional[random.Random] = None,
) -> list[Centroid]:
    """
    Pick k distinct points uniformly without replacement as seeds.

    Coordinates are copied, so later point changes never move a centroid.
    """
    if k < 1:
        raise ValueError(f"k must be >= 1, got {k}")
    if k > len(points):
        raise ValueError(f"Cannot sample {k} seeds from {len(points)} points")

    rng = rng or random.Random()
    indices = rng.sample(range(len(points)), k)
    return [Centroid.of(points[i]) for i in indices]


def generate_colors(
    k: int,
    rng: Optional[random.Random] = None,
    saturation: float = 0.65,
    value: float = 0.95,
) -> list[str]:
    """
    Generate k distinct display colors as "#rrggbb" strings.

    Hues start at a random offset and advance by the golden ratio, which
    keeps successive hues well separated for any k.
    """
    rng = rng or random.Random()
    hue = rng.random()

    colors = []
    seen = set()
    shade = value
    while len(colors) < k:
        r, g, b = colorsys.hsv_to_rgb(hue, saturation, shade)
        color = f"#{round(r * 255):02x}{round(g * 255):02x}{round(b * 255):02x}"
        hue = (hue + _GOLDEN_RATIO_CONJUGATE) % 1.0
        if color in seen:
            # Hues exhausted at this brightness
            shade = shade - 0.03 if shade > 0.4 else value
            continue
        seen.add(color)
        colors.append(color)

    return colors
