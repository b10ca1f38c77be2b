from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

import numpy as np

from winecluster.clustering.hartigan import HartiganReport, select_k
from winecluster.clustering.kmeans import ClusteringResult, fit_kmeans
from winecluster.config import ProjectConfig
from winecluster.io.wine import load_wine_table
from winecluster.preprocessing import scale_columns
from winecluster.reporting.report import assignments_frame, centroids_frame, write_run_markdown_report
from winecluster.stats.contingency import adjusted_rand, cross_tabulate
from winecluster.utils.paths import ensure_dir, project_root_from_config_path, resolve_path, sanitize_tag

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisOutputs:
    run_id: str
    run_dir: Path
    result: ClusteringResult
    hartigan: HartiganReport | None
    ari: float | None
    files: dict[str, Path]


def run_analysis(
    config: ProjectConfig,
    *,
    config_path: Path | None = None,
    run_id: str | None = None,
) -> AnalysisOutputs:
    project_root = project_root_from_config_path(config_path) if config_path is not None else Path.cwd()
    results_dir = ensure_dir(resolve_path(project_root, config.paths.results_dir))
    run_id = sanitize_tag(run_id or datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ"))
    run_dir = ensure_dir(results_dir / run_id)

    data_path = resolve_path(project_root, config.data.path) if config.data.path else None
    table = load_wine_table(data_path, spec=config.data.table_spec())
    logger.info(
        "Loaded %d observations x %d attributes from %s",
        table.n_obs,
        len(table.feature_names),
        data_path or "bundled UCI wine data",
    )

    pre = config.preprocessing
    scaled = scale_columns(table.features, center=pre.center, scale=pre.scale)
    X = scaled.X

    cl = config.clustering
    hartigan: HartiganReport | None = None
    if cl.k_strategy == "hartigan":
        hartigan = select_k(
            X,
            max_k=min(cl.max_k, table.n_obs),
            restarts=cl.restarts,
            random_seed=config.random_seed,
            threshold=cl.hartigan_threshold,
            max_iter=cl.max_iter,
            n_jobs=cl.n_jobs,
        )
        result = hartigan.result_for(hartigan.recommended_k)
    else:
        result = fit_kmeans(
            X,
            k=cl.k_fixed,
            restarts=cl.restarts,
            random_seed=config.random_seed,
            max_iter=cl.max_iter,
            n_jobs=cl.n_jobs,
        )

    files: dict[str, Path] = {}

    assignments_path = run_dir / "assignments.csv"
    assignments_frame(result, table.labels).to_csv(assignments_path, index=False)
    files["assignments"] = assignments_path

    centroids_path = run_dir / "centroids.csv"
    centroids_frame(result, table.feature_names, center=scaled.center, scale=scaled.scale).to_csv(
        centroids_path, index=False
    )
    files["centroids"] = centroids_path

    if hartigan is not None:
        hartigan_path = run_dir / "hartigan.csv"
        hartigan.to_frame().to_csv(hartigan_path, index=False)
        files["hartigan"] = hartigan_path

    crosstab = None
    ari = None
    if table.labels is not None:
        crosstab = cross_tabulate(table.labels.to_numpy(), result.labels)
        ari = adjusted_rand(table.labels.to_numpy(), result.labels)
        crosstab_path = run_dir / "crosstab.csv"
        crosstab.to_csv(crosstab_path)
        files["crosstab"] = crosstab_path

    files["report"] = write_run_markdown_report(
        run_id=run_id,
        result=result,
        hartigan=hartigan,
        crosstab=crosstab,
        ari=ari,
        out_path=run_dir / "report.md",
    )

    meta_path = run_dir / "run_meta.json"
    meta = {
        "run_id": run_id,
        "created_utc": datetime.now(timezone.utc).isoformat(),
        "config": config.model_dump(),
        "n_obs": table.n_obs,
        "feature_names": table.feature_names,
        "k": result.k,
        "k_strategy": cl.k_strategy,
        "hartigan_inconclusive": None if hartigan is None else hartigan.inconclusive,
        "total_ss": result.total_ss,
        "n_iter": result.n_iter,
        "converged": result.converged,
        "best_restart": result.restart,
        "cluster_sizes": np.asarray(result.cluster_sizes).astype(int).tolist(),
        "adjusted_rand_index": ari,
        "outputs": {name: str(path) for name, path in files.items()},
    }
    meta_path.write_text(json.dumps(meta, indent=2), encoding="utf-8")
    files["meta"] = meta_path

    logger.info("Run %s written to %s", run_id, run_dir)
    return AnalysisOutputs(run_id=run_id, run_dir=run_dir, result=result, hartigan=hartigan, ari=ari, files=files)
