from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any

import numpy as np

from winecluster.errors import FitCancelled, InvalidArgument

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITER = 100


@dataclass(frozen=True)
class ClusteringResult:
    """Best-of-restarts k-means solution.

    Cluster ids are an arbitrary permutation: compare two results through
    `winecluster.stats.contingency.match_clusters`, never by raw label equality.
    """

    k: int
    centroids: np.ndarray
    labels: np.ndarray
    total_ss: float
    within_ss: np.ndarray
    n_iter: int
    converged: bool
    restart: int
    ss_history: tuple[float, ...] = field(repr=False)

    @property
    def cluster_sizes(self) -> np.ndarray:
        return np.bincount(self.labels, minlength=self.k)

    @property
    def n_obs(self) -> int:
        return int(self.labels.shape[0])


@dataclass(frozen=True)
class _RestartOutcome:
    restart: int
    centroids: np.ndarray
    labels: np.ndarray
    point_ss: np.ndarray
    n_iter: int
    converged: bool
    ss_history: tuple[float, ...]

    @property
    def total_ss(self) -> float:
        return float(self.point_ss.sum())


def as_dataset(X: Any) -> np.ndarray:
    """Coerce an N x D numeric table (ndarray, DataFrame or row sequence) to float64."""
    if hasattr(X, "to_numpy"):
        X = X.to_numpy()
    if not isinstance(X, np.ndarray):
        rows = [np.asarray(row) for row in X]
        if any(row.ndim != 1 for row in rows):
            raise InvalidArgument("Each observation must be a flat sequence of attributes (dataset must be 2D)")
        widths = sorted({row.shape[0] for row in rows})
        if len(widths) > 1:
            raise InvalidArgument(f"Observations have mismatched dimensionality: {widths}")
        X = np.asarray(rows) if rows else np.empty((0, 0))
    try:
        arr = np.asarray(X, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise InvalidArgument(f"Dataset must be numeric: {exc}") from exc

    if arr.ndim != 2:
        raise InvalidArgument(f"Dataset must be 2D (observations x attributes), got ndim={arr.ndim}")
    if arr.shape[0] == 0 or arr.shape[1] == 0:
        raise InvalidArgument(f"Dataset must have at least one observation and one attribute, got {arr.shape}")
    if not np.all(np.isfinite(arr)):
        raise InvalidArgument("Dataset contains NaN or infinite values")
    return np.ascontiguousarray(arr)


def require_int(name: str, value: Any, *, minimum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise InvalidArgument(f"{name} must be an integer, got {value!r}")
    if value < minimum:
        raise InvalidArgument(f"{name} must be >= {minimum}, got {value}")
    return int(value)


def check_fit_arguments(
    X: np.ndarray,
    *,
    k: int,
    restarts: int,
    random_seed: int,
    max_iter: int,
    n_jobs: int,
) -> None:
    """Fail fast on arguments a fit cannot honor; nothing is computed beforehand."""
    n_obs = X.shape[0]
    k = require_int("k", k, minimum=1)
    if k > n_obs:
        raise InvalidArgument(f"k must be <= number of observations (n={n_obs}, k={k})")
    require_int("restarts", restarts, minimum=1)
    require_int("random_seed", random_seed, minimum=0)
    require_int("max_iter", max_iter, minimum=1)
    require_int("n_jobs", n_jobs, minimum=1)

    n_distinct = int(np.unique(X, axis=0).shape[0])
    if k > n_distinct:
        raise InvalidArgument(f"k must be <= number of distinct observations (distinct={n_distinct}, k={k})")


def _squared_distances(X: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    # (n,k)
    return ((X[:, None, :] - centroids[None, :, :]) ** 2).sum(axis=2)


def _as_centroids(X: np.ndarray, centroids: Any) -> np.ndarray:
    centroids = np.asarray(centroids, dtype=np.float64)
    if centroids.ndim != 2 or centroids.shape[0] == 0 or centroids.shape[1] != X.shape[1]:
        raise InvalidArgument(
            f"Centroids of shape {centroids.shape} do not match {X.shape[1]}-dimensional observations"
        )
    return centroids


def assign_to_centroids(X: Any, centroids: np.ndarray) -> np.ndarray:
    """Nearest-centroid labels; ties go to the lowest centroid index."""
    X = as_dataset(X)
    return _nearest(X, _as_centroids(X, centroids))


def _nearest(X: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    # argmin returns the first minimum, i.e. the lowest centroid index on ties
    return np.argmin(_squared_distances(X, centroids), axis=1).astype(int)


def _point_ss(X: np.ndarray, labels: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    return ((X - centroids[labels]) ** 2).sum(axis=1)


def total_sum_of_squares(X: Any, labels: np.ndarray, centroids: np.ndarray) -> float:
    X = as_dataset(X)
    centroids = _as_centroids(X, centroids)
    labels = np.asarray(labels)
    if labels.shape != (X.shape[0],):
        raise InvalidArgument(f"Expected {X.shape[0]} labels, got shape {labels.shape}")
    if not np.issubdtype(labels.dtype, np.integer):
        raise InvalidArgument(f"Labels must be integers, got dtype {labels.dtype}")
    if (labels.min() < 0 or labels.max() >= centroids.shape[0]):
        raise InvalidArgument(f"Labels must lie in 0..{centroids.shape[0] - 1}")
    return float(_point_ss(X, labels.astype(int), centroids).sum())


def _reseed(X: np.ndarray, centroids: np.ndarray, rng: np.random.Generator) -> np.ndarray:
    taken = (X[:, None, :] == centroids[None, :, :]).all(axis=2).any(axis=1)
    candidates = np.flatnonzero(~taken)
    if candidates.size == 0:
        raise InvalidArgument("Cannot re-seed an empty cluster: every observation already coincides with a centroid")
    return X[candidates[rng.integers(candidates.size)]].copy()


def _update_centroids(
    X: np.ndarray, labels: np.ndarray, centroids: np.ndarray, rng: np.random.Generator
) -> tuple[np.ndarray, int]:
    k = centroids.shape[0]
    counts = np.bincount(labels, minlength=k)
    updated = centroids.copy()
    for c in range(k):
        if counts[c]:
            updated[c] = X[labels == c].mean(axis=0)

    empty = np.flatnonzero(counts == 0)
    for c in empty:
        updated[c] = _reseed(X, updated, rng)
    return updated, int(empty.size)


def _run_restart(
    X: np.ndarray,
    *,
    k: int,
    max_iter: int,
    seed_seq: np.random.SeedSequence,
    restart: int,
    cancel: threading.Event | None,
) -> _RestartOutcome:
    rng = np.random.default_rng(seed_seq)
    init_idx = rng.choice(X.shape[0], size=k, replace=False)
    centroids = X[init_idx].copy()

    labels: np.ndarray | None = None
    history: list[float] = []
    converged = False
    n_iter = 0
    for n_iter in range(1, max_iter + 1):
        if cancel is not None and cancel.is_set():
            raise FitCancelled(f"k-means cancelled (k={k}, restart={restart}, iteration={n_iter})")

        new_labels = _nearest(X, centroids)
        changed = labels is None or bool(np.any(new_labels != labels))
        labels = new_labels

        centroids, n_reseeded = _update_centroids(X, labels, centroids, rng)
        history.append(float(_point_ss(X, labels, centroids).sum()))
        if n_reseeded:
            logger.debug("k=%d restart=%d iteration=%d: re-seeded %d empty cluster(s)", k, restart, n_iter, n_reseeded)

        if not changed and not n_reseeded:
            converged = True
            break

    assert labels is not None
    outcome = _RestartOutcome(
        restart=restart,
        centroids=centroids,
        labels=labels,
        point_ss=_point_ss(X, labels, centroids),
        n_iter=n_iter,
        converged=converged,
        ss_history=tuple(history),
    )
    logger.debug(
        "k=%d restart=%d: total_ss=%.6g after %d iteration(s) (converged=%s)",
        k,
        restart,
        outcome.total_ss,
        n_iter,
        converged,
    )
    return outcome


def fit_kmeans(
    X: Any,
    *,
    k: int,
    restarts: int = 1,
    random_seed: int = 0,
    max_iter: int = DEFAULT_MAX_ITER,
    n_jobs: int = 1,
    cancel: threading.Event | None = None,
) -> ClusteringResult:
    """Lloyd's k-means from `restarts` random initializations; the lowest total SS wins.

    Restart r draws from its own generator, spawned from `random_seed` at index r,
    so results are reproducible and independent of `n_jobs`. With `n_jobs > 1`
    restarts run on a bounded thread pool and share only read access to X.
    `cancel` is checked before every iteration; once set, FitCancelled is raised.
    Hitting `max_iter` is reported through `converged=False`, not raised.
    """
    X = as_dataset(X)
    check_fit_arguments(X, k=k, restarts=restarts, random_seed=random_seed, max_iter=max_iter, n_jobs=n_jobs)
    k = int(k)

    seed_seqs = np.random.SeedSequence(int(random_seed)).spawn(int(restarts))

    def run(restart: int) -> _RestartOutcome:
        return _run_restart(X, k=k, max_iter=max_iter, seed_seq=seed_seqs[restart], restart=restart, cancel=cancel)

    if n_jobs == 1 or restarts == 1:
        outcomes = [run(r) for r in range(restarts)]
    else:
        with ThreadPoolExecutor(max_workers=min(n_jobs, restarts)) as pool:
            outcomes = list(pool.map(run, range(restarts)))

    # min() keeps the first minimum: ties go to the lowest restart index
    best = min(outcomes, key=lambda o: o.total_ss)
    if not best.converged:
        logger.warning(
            "k-means (k=%d) hit the iteration cap (%d) without converging; result is still usable", k, max_iter
        )

    centroids = best.centroids.copy()
    labels = best.labels.copy()
    within_ss = np.bincount(labels, weights=best.point_ss, minlength=k).astype(np.float64)
    for arr in (centroids, labels, within_ss):
        arr.setflags(write=False)

    result = ClusteringResult(
        k=k,
        centroids=centroids,
        labels=labels,
        total_ss=best.total_ss,
        within_ss=within_ss,
        n_iter=best.n_iter,
        converged=best.converged,
        restart=best.restart,
        ss_history=best.ss_history,
    )
    logger.info(
        "k-means k=%d: best total_ss=%.6g from restart %d/%d, sizes=%s",
        k,
        result.total_ss,
        best.restart + 1,
        restarts,
        result.cluster_sizes.tolist(),
    )
    return result
