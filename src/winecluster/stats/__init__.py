"""Partition comparison (contingency tables, cluster matching, ARI)."""

from .contingency import adjusted_rand, cross_tabulate, match_clusters, partition_agreement, relabel

__all__ = ["adjusted_rand", "cross_tabulate", "match_clusters", "partition_agreement", "relabel"]
