"""
Stepwise K-Means clustering.

Models for points/centroids and the pure functions of one Lloyd iteration.
"""

from .models import (
    Point,
    Centroid,
    ClusterState,
    POINT_NAME_PREFIX,
)
from .algorithm import (
    DEFAULT_CONVERGENCE_TOL,
    IterationOutcome,
    euclidean_distance,
    distance_matrix,
    assign_points,
    update_centroids,
    centroid_shifts,
    has_converged,
    lloyd_iteration,
    sample_initial_centroids,
    generate_colors,
)

__all__ = [
    # Models
    "Point",
    "Centroid",
    "ClusterState",
    "POINT_NAME_PREFIX",
    # Algorithm
    "DEFAULT_CONVERGENCE_TOL",
    "IterationOutcome",
    "euclidean_distance",
    "distance_matrix",
    "assign_points",
    "update_centroids",
    "centroid_shifts",
    "has_converged",
    "lloyd_iteration",
    "sample_initial_centroids",
    "generate_colors",
]
