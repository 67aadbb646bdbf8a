"""
Error taxonomy for the clustering engine.
"""


class KMeansError(Exception):
    """Base class for engine errors."""


class InvalidParameter(KMeansError, ValueError):
    """Bad k or bad coordinates. Raised before any mutation."""


class NotReady(KMeansError):
    """
    Operation not available in the current state.

    step() without centroids or after convergence, revert() with empty
    history. Only raised when the caller asks for strict behavior.
    """


class ConfigError(KMeansError, ValueError):
    """Invalid configuration values or unreadable input files."""
