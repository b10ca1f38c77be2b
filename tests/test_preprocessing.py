from __future__ import annotations

import numpy as np
import pytest

from winecluster.errors import InvalidArgument
from winecluster.preprocessing import scale_columns


def test_scale_columns_z_scores_with_sample_sd() -> None:
    X = np.array([[1.0, 10.0], [2.0, 20.0], [3.0, 60.0]])
    scaled = scale_columns(X)
    assert np.allclose(scaled.X.mean(axis=0), 0.0)
    assert np.allclose(scaled.X.std(axis=0, ddof=1), 1.0)
    assert np.allclose(scaled.center, [2.0, 30.0])
    assert np.allclose(scaled.transform(X), scaled.X)


def test_scale_columns_can_skip_steps() -> None:
    X = np.array([[1.0, 10.0], [3.0, 30.0]])
    centered = scale_columns(X, scale=False)
    assert centered.scale is None
    assert np.allclose(centered.X, [[-1.0, -10.0], [1.0, 10.0]])

    untouched = scale_columns(X, center=False, scale=False)
    assert np.array_equal(untouched.X, X)


def test_constant_column_cannot_be_scaled() -> None:
    X = np.array([[1.0, 5.0], [2.0, 5.0], [3.0, 5.0]])
    with pytest.raises(InvalidArgument):
        scale_columns(X)


def test_uncentered_scaling_uses_root_mean_square() -> None:
    X = np.array([[1.0, 2.0], [2.0, 4.0], [2.0, 4.0]])
    scaled = scale_columns(X, center=False)
    rms = np.sqrt((X**2).sum(axis=0) / 2)
    assert scaled.center is None
    assert np.allclose(scaled.scale, rms)
    assert np.allclose(scaled.X, X / rms)
