from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np

from winecluster.clustering.kmeans import as_dataset
from winecluster.errors import InvalidArgument


@dataclass(frozen=True)
class ScaledData:
    X: np.ndarray
    center: np.ndarray | None
    scale: np.ndarray | None

    def transform(self, X_new: Any) -> np.ndarray:
        """Apply the stored centering/scaling to new observations."""
        out = as_dataset(X_new).copy()
        if self.center is not None:
            out -= self.center
        if self.scale is not None:
            out /= self.scale
        return out


def scale_columns(X: Any, *, center: bool = True, scale: bool = True) -> ScaledData:
    """Column-wise scaling with the conventions of R's `scale()`.

    Centered columns are divided by their sample standard deviation (ddof=1);
    uncentered columns by their root-mean-square, sqrt(sum(x**2) / (n - 1)).
    """
    X = as_dataset(X)
    out = X.copy()

    means = None
    if center:
        means = X.mean(axis=0)
        out -= means

    sds = None
    if scale:
        if X.shape[0] < 2:
            raise InvalidArgument("Scaling needs at least two observations")
        if center:
            sds = X.std(axis=0, ddof=1)
        else:
            sds = np.sqrt((X**2).sum(axis=0) / (X.shape[0] - 1))
        constant = np.flatnonzero(sds == 0)
        if constant.size:
            raise InvalidArgument(f"Cannot scale zero-spread column(s): {constant.tolist()}")
        out /= sds

    return ScaledData(X=out, center=means, scale=sds)
