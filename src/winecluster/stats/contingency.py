from __future__ import annotations

from typing import Any

import numpy as np
import pandas as pd
from scipy.optimize import linear_sum_assignment
from sklearn.metrics import adjusted_rand_score


def _as_labels(labels: Any, name: str) -> np.ndarray:
    arr = np.asarray(labels)
    if arr.ndim != 1:
        raise ValueError(f"{name} must be 1D")
    return arr


def _check_same_length(a: np.ndarray, b: np.ndarray) -> None:
    if a.shape[0] != b.shape[0]:
        raise ValueError(f"Label vectors differ in length ({a.shape[0]} vs {b.shape[0]})")


def cross_tabulate(true_labels: Any, cluster_labels: Any) -> pd.DataFrame:
    """Known class (rows) by cluster (columns) counts."""
    t = _as_labels(true_labels, "true_labels")
    c = _as_labels(cluster_labels, "cluster_labels")
    _check_same_length(t, c)
    return pd.crosstab(
        pd.Series(t, name="class"),
        pd.Series(c, name="cluster"),
    )


def match_clusters(reference: Any, labels: Any) -> dict[int, int]:
    """Map each cluster id in `labels` to the `reference` id it overlaps most.

    The mapping maximizes total overlap on the contingency table (Hungarian
    assignment). Clusters left over when `labels` has more ids than `reference`
    keep their own id shifted past the reference ids.
    """
    ref = _as_labels(reference, "reference").astype(int)
    lab = _as_labels(labels, "labels").astype(int)
    _check_same_length(ref, lab)
    if lab.size == 0:
        return {}

    table = pd.crosstab(pd.Series(lab, name="labels"), pd.Series(ref, name="reference"))
    overlap = table.to_numpy()
    row_ind, col_ind = linear_sum_assignment(-overlap)

    mapping = {int(table.index[r]): int(table.columns[c]) for r, c in zip(row_ind, col_ind)}
    next_id = int(max(table.columns.max(), table.index.max())) + 1
    for lab_id in table.index:
        if int(lab_id) not in mapping:
            mapping[int(lab_id)] = next_id
            next_id += 1
    return mapping


def relabel(labels: Any, mapping: dict[int, int]) -> np.ndarray:
    lab = _as_labels(labels, "labels").astype(int)
    return np.array([mapping[int(c)] for c in lab], dtype=int)


def partition_agreement(a: Any, b: Any) -> float:
    """Fraction of observations that fall in matched clusters of the two partitions."""
    a_arr = _as_labels(a, "a").astype(int)
    b_arr = _as_labels(b, "b").astype(int)
    _check_same_length(a_arr, b_arr)
    if a_arr.size == 0:
        return 1.0
    mapped = relabel(b_arr, match_clusters(a_arr, b_arr))
    return float(np.mean(mapped == a_arr))


def adjusted_rand(a: Any, b: Any) -> float:
    a_arr = _as_labels(a, "a")
    b_arr = _as_labels(b, "b")
    _check_same_length(a_arr, b_arr)
    return float(adjusted_rand_score(a_arr, b_arr))
