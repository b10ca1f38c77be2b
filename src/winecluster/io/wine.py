from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import pandas as pd
from pandas.api.types import is_numeric_dtype
from sklearn.datasets import load_wine

# Attribute order of the UCI `wine.data` file (after the leading class column).
UCI_WINE_FEATURES = [
    "alcohol",
    "malic_acid",
    "ash",
    "alcalinity_of_ash",
    "magnesium",
    "total_phenols",
    "flavanoids",
    "nonflavanoid_phenols",
    "proanthocyanins",
    "color_intensity",
    "hue",
    "od280/od315_of_diluted_wines",
    "proline",
]


@dataclass(frozen=True)
class WineTableSpec:
    label_column: int | str | None = 0
    header: bool = False
    delimiter: str = ","


@dataclass(frozen=True)
class WineTable:
    features: pd.DataFrame
    labels: pd.Series | None

    @property
    def feature_names(self) -> list[str]:
        return [str(c) for c in self.features.columns]

    @property
    def n_obs(self) -> int:
        return int(len(self.features))


def _bundled_wine() -> WineTable:
    bunch = load_wine(as_frame=True)
    features = bunch.data.reset_index(drop=True)
    # sklearn codes cultivars 0..2; the UCI file uses 1..3
    labels = (bunch.target.astype(int) + 1).rename("cultivar").reset_index(drop=True)
    return WineTable(features=features, labels=labels)


def load_wine_table(path: str | Path | None = None, *, spec: WineTableSpec | None = None) -> WineTable:
    """Read the wine table from a delimited file, or the copy bundled with scikit-learn when `path` is None."""
    if path is None:
        return _bundled_wine()

    spec = spec or WineTableSpec()
    df = pd.read_csv(path, header=0 if spec.header else None, sep=spec.delimiter)
    if df.empty:
        raise ValueError(f"Wine table is empty: {path}")

    labels = None
    if spec.label_column is not None:
        label_col = spec.label_column
        if isinstance(label_col, int) and label_col not in df.columns:
            if not 0 <= label_col < df.shape[1]:
                raise ValueError(f"Label column index {label_col} out of range for {df.shape[1]} columns")
            label_col = df.columns[label_col]
        if label_col not in df.columns:
            raise ValueError(f"Wine table is missing label column: {spec.label_column!r}")
        labels = df[label_col].rename("cultivar").reset_index(drop=True)
        df = df.drop(columns=[label_col])

    if not spec.header and df.shape[1] == len(UCI_WINE_FEATURES):
        df.columns = UCI_WINE_FEATURES
    df.columns = [str(c) for c in df.columns]

    non_numeric = [c for c in df.columns if not is_numeric_dtype(df[c])]
    if non_numeric:
        raise ValueError(f"Wine table has non-numeric feature columns: {non_numeric}")
    return WineTable(features=df.reset_index(drop=True), labels=labels)
