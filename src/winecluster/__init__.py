"""k-means cluster analysis of the UCI wine data, with Hartigan's rule for k."""

from .clustering import ClusteringResult, HartiganReport, fit_kmeans, select_k
from .errors import FitCancelled, InvalidArgument, WineclusterError

__version__ = "0.1.0"

__all__ = [
    "ClusteringResult",
    "FitCancelled",
    "HartiganReport",
    "InvalidArgument",
    "WineclusterError",
    "fit_kmeans",
    "select_k",
]
