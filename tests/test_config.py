from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from winecluster.config import ProjectConfig, load_config


def test_repo_config_loads() -> None:
    project_root = Path(__file__).resolve().parents[1]
    cfg = load_config(project_root / "configs" / "wine.yaml")
    assert cfg.data.path is None
    assert cfg.clustering.k_strategy == "hartigan"
    assert cfg.clustering.hartigan_threshold == 10.0
    assert cfg.data.table_spec().label_column == 0


def test_defaults_without_file() -> None:
    cfg = ProjectConfig()
    assert cfg.clustering.restarts == 25
    assert cfg.clustering.max_iter == 100
    assert cfg.paths.results_dir == "results"


def test_partial_yaml_keeps_defaults(tmp_path: Path) -> None:
    path = tmp_path / "c.yaml"
    path.write_text("random_seed: 7\nclustering:\n  k_strategy: fixed\n  k_fixed: 4\n", encoding="utf-8")
    cfg = load_config(path)
    assert cfg.random_seed == 7
    assert cfg.clustering.k_fixed == 4
    assert cfg.clustering.max_k == 10
    assert cfg.preprocessing.scale is True


@pytest.mark.parametrize(
    "body",
    [
        "clustering:\n  k_strategy: elbow\n",
        "clustering:\n  restarts: 0\n",
        "clustering:\n  max_k: 1\n",
        "random_seed: -3\n",
    ],
)
def test_invalid_values_rejected(tmp_path: Path, body: str) -> None:
    path = tmp_path / "c.yaml"
    path.write_text(body, encoding="utf-8")
    with pytest.raises(ValidationError):
        load_config(path)
