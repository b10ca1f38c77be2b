"""k-means engine and Hartigan's rule for choosing k."""

from .hartigan import HartiganReport, HartiganRow, hartigan_index, select_k
from .kmeans import ClusteringResult, assign_to_centroids, fit_kmeans, total_sum_of_squares

__all__ = [
    "ClusteringResult",
    "HartiganReport",
    "HartiganRow",
    "assign_to_centroids",
    "fit_kmeans",
    "hartigan_index",
    "select_k",
    "total_sum_of_squares",
]
