from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field

from winecluster.io.wine import WineTableSpec


class DataConfig(BaseModel):
    path: str | None = None
    label_column: int | str | None = 0
    header: bool = False
    delimiter: str = ","

    def table_spec(self) -> WineTableSpec:
        return WineTableSpec(label_column=self.label_column, header=self.header, delimiter=self.delimiter)


class PreprocessingConfig(BaseModel):
    center: bool = True
    scale: bool = True


class ClusteringConfig(BaseModel):
    k_strategy: Literal["hartigan", "fixed"] = "hartigan"
    k_fixed: int = Field(default=3, ge=1)
    max_k: int = Field(default=10, ge=2)
    restarts: int = Field(default=25, ge=1)
    max_iter: int = Field(default=100, ge=1)
    n_jobs: int = Field(default=1, ge=1)
    hartigan_threshold: float = 10.0


class PathsConfig(BaseModel):
    results_dir: str = "results"


class ProjectConfig(BaseModel):
    random_seed: int = Field(default=1234, ge=0)
    data: DataConfig = Field(default_factory=DataConfig)
    preprocessing: PreprocessingConfig = Field(default_factory=PreprocessingConfig)
    clustering: ClusteringConfig = Field(default_factory=ClusteringConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)


def load_config(path: str | Path) -> ProjectConfig:
    config_path = Path(path)
    data: dict[str, Any] = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    return ProjectConfig.model_validate(data)
