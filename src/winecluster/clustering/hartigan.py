from __future__ import annotations

import logging
import math
import threading
from dataclasses import dataclass, field
from typing import Any

import pandas as pd

from winecluster.clustering.kmeans import (
    DEFAULT_MAX_ITER,
    ClusteringResult,
    as_dataset,
    check_fit_arguments,
    fit_kmeans,
    require_int,
)
from winecluster.errors import InvalidArgument

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 10.0


@dataclass(frozen=True)
class HartiganRow:
    k: int
    total_ss: float
    hartigan_index: float | None


@dataclass(frozen=True)
class HartiganReport:
    rows: tuple[HartiganRow, ...]
    recommended_k: int
    inconclusive: bool
    threshold: float
    n_obs: int
    fits: tuple[ClusteringResult, ...] = field(repr=False, compare=False)

    def result_for(self, k: int) -> ClusteringResult:
        for fit in self.fits:
            if fit.k == k:
                return fit
        raise KeyError(f"No fit recorded for k={k}")

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            {
                "k": [r.k for r in self.rows],
                "total_ss": [r.total_ss for r in self.rows],
                "hartigan_index": [r.hartigan_index for r in self.rows],
                "recommended": [r.k == self.recommended_k for r in self.rows],
            }
        )


def hartigan_index(ss_k: float, ss_next: float, *, n_obs: int, k: int) -> float:
    """H(k) = (SS(k)/SS(k+1) - 1) * (n - k - 1).

    A perfect fit at k (SS(k) == 0) gives 0; a perfect fit only at k+1 gives +inf.
    """
    if ss_k == 0:
        return 0.0
    if ss_next == 0:
        return math.inf
    return (ss_k / ss_next - 1.0) * (n_obs - k - 1)


def select_k(
    X: Any,
    *,
    max_k: int,
    restarts: int = 1,
    random_seed: int = 0,
    threshold: float = DEFAULT_THRESHOLD,
    max_iter: int = DEFAULT_MAX_ITER,
    n_jobs: int = 1,
    cancel: threading.Event | None = None,
) -> HartiganReport:
    """Hartigan's rule: the smallest k whose H(k) is at or below `threshold`.

    Fits k = 1..max_k one after another with identical restarts and seed; `n_jobs`
    parallelizes the restarts inside each fit, never the k values. When no k
    qualifies, max_k is returned as a lower bound and the report is flagged
    inconclusive.
    """
    X = as_dataset(X)
    n_obs = X.shape[0]
    max_k = require_int("max_k", max_k, minimum=2)
    if max_k > n_obs:
        raise InvalidArgument(f"max_k must be <= number of observations (n={n_obs}, max_k={max_k})")
    if math.isnan(threshold):
        raise InvalidArgument("threshold must be a number")
    check_fit_arguments(X, k=max_k, restarts=restarts, random_seed=random_seed, max_iter=max_iter, n_jobs=n_jobs)

    fits = tuple(
        fit_kmeans(
            X,
            k=k,
            restarts=restarts,
            random_seed=random_seed,
            max_iter=max_iter,
            n_jobs=n_jobs,
            cancel=cancel,
        )
        for k in range(1, max_k + 1)
    )

    rows: list[HartiganRow] = []
    for i, fit in enumerate(fits):
        h = None
        if i + 1 < len(fits):
            h = hartigan_index(fit.total_ss, fits[i + 1].total_ss, n_obs=n_obs, k=fit.k)
        rows.append(HartiganRow(k=fit.k, total_ss=fit.total_ss, hartigan_index=h))

    recommended = next((r.k for r in rows if r.hartigan_index is not None and r.hartigan_index <= threshold), None)
    inconclusive = recommended is None
    if inconclusive:
        recommended = max_k
        logger.warning("Hartigan's rule did not stop by max_k=%d; reporting it as a lower bound", max_k)
    else:
        logger.info("Hartigan's rule recommends k=%d (threshold=%g)", recommended, threshold)

    return HartiganReport(
        rows=tuple(rows),
        recommended_k=int(recommended),
        inconclusive=inconclusive,
        threshold=float(threshold),
        n_obs=n_obs,
        fits=fits,
    )
