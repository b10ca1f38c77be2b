from __future__ import annotations

from pathlib import Path

import pytest

from winecluster.io.wine import UCI_WINE_FEATURES, WineTableSpec, load_wine_table


def test_bundled_wine_table() -> None:
    table = load_wine_table()
    assert table.n_obs == 178
    assert len(table.feature_names) == 13
    assert table.labels is not None
    assert sorted(table.labels.unique().tolist()) == [1, 2, 3]
    assert table.labels.value_counts().sort_index().tolist() == [59, 71, 48]


def test_wine_data_file_without_header(tmp_path: Path) -> None:
    row = ",".join(["1"] + [str(float(i)) for i in range(13)])
    row2 = ",".join(["2"] + [str(float(i + 1)) for i in range(13)])
    path = tmp_path / "wine.data"
    path.write_text(f"{row}\n{row2}\n", encoding="utf-8")

    table = load_wine_table(path)
    assert table.feature_names == UCI_WINE_FEATURES
    assert table.labels is not None
    assert table.labels.tolist() == [1, 2]
    assert table.features["alcohol"].tolist() == [0.0, 1.0]


def test_headered_file_with_named_label(tmp_path: Path) -> None:
    path = tmp_path / "wine.csv"
    path.write_text("a;kind;b\n1.0;x;2.0\n3.0;y;4.0\n", encoding="utf-8")

    table = load_wine_table(path, spec=WineTableSpec(label_column="kind", header=True, delimiter=";"))
    assert table.feature_names == ["a", "b"]
    assert table.labels is not None
    assert table.labels.tolist() == ["x", "y"]


def test_unlabelled_file(tmp_path: Path) -> None:
    path = tmp_path / "x.csv"
    path.write_text("1.0,2.0\n3.0,4.0\n", encoding="utf-8")
    table = load_wine_table(path, spec=WineTableSpec(label_column=None))
    assert table.labels is None
    assert table.features.shape == (2, 2)


def test_non_numeric_feature_raises(tmp_path: Path) -> None:
    path = tmp_path / "bad.csv"
    path.write_text("1,abc,2.0\n2,def,3.0\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_wine_table(path)
