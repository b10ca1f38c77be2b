from __future__ import annotations

import math
from pathlib import Path

import numpy as np
import pandas as pd

from winecluster.clustering.hartigan import HartiganReport
from winecluster.clustering.kmeans import ClusteringResult


def _fmt_float(x: float, ndigits: int = 3) -> str:
    if math.isinf(x):
        return "inf"
    return f"{x:.{ndigits}f}"


def assignments_frame(result: ClusteringResult, true_labels: pd.Series | None = None) -> pd.DataFrame:
    df = pd.DataFrame({"row": np.arange(result.n_obs), "Cluster": result.labels.astype(int)})
    if true_labels is not None:
        df["Class"] = np.asarray(true_labels)
    return df


def centroids_frame(
    result: ClusteringResult,
    feature_names: list[str],
    *,
    center: np.ndarray | None = None,
    scale: np.ndarray | None = None,
) -> pd.DataFrame:
    """Centroids in the fitted space; pass `center`/`scale` to map them back to original units."""
    centers = np.array(result.centroids, dtype=float)
    if scale is not None:
        centers = centers * scale
    if center is not None:
        centers = centers + center
    df = pd.DataFrame(centers, columns=feature_names)
    df.insert(0, "Cluster", np.arange(result.k))
    df.insert(1, "Size", result.cluster_sizes.astype(int))
    df.insert(2, "Within_SS", np.asarray(result.within_ss, dtype=float))
    return df


def write_run_markdown_report(
    *,
    run_id: str,
    result: ClusteringResult,
    hartigan: HartiganReport | None,
    crosstab: pd.DataFrame | None,
    ari: float | None,
    out_path: Path,
) -> Path:
    out_path.parent.mkdir(parents=True, exist_ok=True)

    lines: list[str] = []
    lines.append(f"# winecluster run report ({run_id})")
    lines.append("")

    if hartigan is not None:
        lines.append("## Choosing k (Hartigan's rule)")
        lines.append("")
        for row in hartigan.rows:
            h = "-" if row.hartigan_index is None else _fmt_float(row.hartigan_index, 2)
            marker = " <- recommended" if row.k == hartigan.recommended_k else ""
            lines.append(f"- k={row.k}: total SS={_fmt_float(row.total_ss, 2)}, H={h}{marker}")
        if hartigan.inconclusive:
            lines.append("")
            lines.append(
                f"- No k met H <= {_fmt_float(hartigan.threshold, 1)}; k={hartigan.recommended_k} is a lower bound."
            )
        lines.append("")

    lines.append(f"## k-means fit (k={result.k})")
    lines.append("")
    lines.append(
        f"- Total within-cluster SS={_fmt_float(result.total_ss, 3)} "
        f"after {result.n_iter} iteration(s), converged={result.converged}, best restart={result.restart}"
    )
    for c, (size, wss) in enumerate(zip(result.cluster_sizes.tolist(), result.within_ss.tolist())):
        lines.append(f"  - Cluster {c}: n={int(size)}, within SS={_fmt_float(float(wss), 3)}")

    if crosstab is not None:
        lines.append("")
        lines.append("## Clusters vs known cultivar")
        lines.append("")
        lines.append("| class | " + " | ".join(str(c) for c in crosstab.columns) + " |")
        lines.append("|---" * (len(crosstab.columns) + 1) + "|")
        for cls, r in crosstab.iterrows():
            lines.append(f"| {cls} | " + " | ".join(str(int(v)) for v in r.tolist()) + " |")
        if ari is not None:
            lines.append("")
            lines.append(f"- Adjusted Rand index={_fmt_float(ari, 3)}")

    out_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return out_path
