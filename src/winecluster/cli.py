from __future__ import annotations

import logging
from pathlib import Path
from typing import NoReturn

import typer
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from winecluster.clustering.hartigan import DEFAULT_THRESHOLD, select_k
from winecluster.clustering.kmeans import DEFAULT_MAX_ITER, fit_kmeans
from winecluster.config import load_config
from winecluster.errors import WineclusterError
from winecluster.io.wine import WineTable, WineTableSpec, load_wine_table
from winecluster.pipeline.analysis import run_analysis
from winecluster.preprocessing import scale_columns
from winecluster.stats.contingency import adjusted_rand, cross_tabulate

app = typer.Typer(no_args_is_help=True)
console = Console()


def configure_logging(level: str) -> None:
    level_no = logging.getLevelName(level.upper())
    if not isinstance(level_no, int):
        raise ValueError(f"Unknown log level: {level!r} (use DEBUG, INFO, WARNING, ERROR or CRITICAL)")
    logging.basicConfig(
        level=level_no,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.callback()
def main(
    log_level: str = typer.Option("WARNING", "--log-level", help="Logging level (DEBUG, INFO, WARNING, ...)."),
) -> None:
    """k-means cluster analysis of the UCI wine data."""
    try:
        configure_logging(log_level)
    except ValueError as exc:
        _fail(exc, code=2)


def _load(data: str | None, label_column: int | None) -> WineTable:
    return load_wine_table(data, spec=WineTableSpec(label_column=label_column))


def _fail(exc: Exception, *, code: int = 1) -> NoReturn:
    console.print(f"[red]ERROR[/red] {escape(str(exc))}")
    raise typer.Exit(code=code) from exc


@app.command("fit")
def fit(
    k: int = typer.Option(..., "--k", "-k", help="Number of clusters."),
    restarts: int = typer.Option(25, "--restarts", help="Random restarts; the lowest total SS wins."),
    seed: int = typer.Option(1234, "--seed", help="Random seed."),
    max_iter: int = typer.Option(DEFAULT_MAX_ITER, "--max-iter", help="Iteration cap per restart."),
    n_jobs: int = typer.Option(1, "--n-jobs", help="Worker threads for restarts."),
    data: str | None = typer.Option(None, "--data", "-d", help="wine.data style CSV (default: bundled copy)."),
    label_column: int | None = typer.Option(0, "--label-column", help="Index of the class column in --data."),
    scale: bool = typer.Option(True, "--scale/--no-scale", help="z-score attributes before clustering."),
) -> None:
    """Fit k-means for a fixed k and compare clusters with the known cultivars."""
    try:
        table = _load(data, label_column)
        X = scale_columns(table.features, center=scale, scale=scale).X
        result = fit_kmeans(X, k=k, restarts=restarts, random_seed=seed, max_iter=max_iter, n_jobs=n_jobs)
    except (WineclusterError, ValueError) as exc:
        _fail(exc)

    status = "[green]converged[/green]" if result.converged else "[yellow]iteration cap reached[/yellow]"
    console.print(
        f"k={result.k}: total within-cluster SS={result.total_ss:.3f} "
        f"({result.n_iter} iterations, {status}, best restart {result.restart})"
    )

    sizes = Table(title="Clusters")
    sizes.add_column("Cluster", justify="right")
    sizes.add_column("Size", justify="right")
    sizes.add_column("Within SS", justify="right")
    for c, (size, wss) in enumerate(zip(result.cluster_sizes.tolist(), result.within_ss.tolist())):
        sizes.add_row(str(c), str(int(size)), f"{wss:.3f}")
    console.print(sizes)

    if table.labels is not None:
        ct = cross_tabulate(table.labels.to_numpy(), result.labels)
        crosstab = Table(title="Cultivar x cluster")
        crosstab.add_column("Class")
        for c in ct.columns:
            crosstab.add_column(str(c), justify="right")
        for cls, row in ct.iterrows():
            crosstab.add_row(str(cls), *(str(int(v)) for v in row.tolist()))
        console.print(crosstab)
        console.print(f"Adjusted Rand index: {adjusted_rand(table.labels.to_numpy(), result.labels):.3f}")


@app.command("select-k")
def select_k_command(
    max_k: int = typer.Option(10, "--max-k", help="Largest k to fit."),
    restarts: int = typer.Option(25, "--restarts", help="Random restarts per k."),
    seed: int = typer.Option(1234, "--seed", help="Random seed."),
    threshold: float = typer.Option(DEFAULT_THRESHOLD, "--threshold", help="Stop once H(k) <= threshold."),
    max_iter: int = typer.Option(DEFAULT_MAX_ITER, "--max-iter", help="Iteration cap per restart."),
    n_jobs: int = typer.Option(1, "--n-jobs", help="Worker threads for restarts."),
    data: str | None = typer.Option(None, "--data", "-d", help="wine.data style CSV (default: bundled copy)."),
    label_column: int | None = typer.Option(0, "--label-column", help="Index of the class column in --data."),
    scale: bool = typer.Option(True, "--scale/--no-scale", help="z-score attributes before clustering."),
) -> None:
    """Choose k with Hartigan's rule."""
    try:
        table = _load(data, label_column)
        X = scale_columns(table.features, center=scale, scale=scale).X
        report = select_k(
            X,
            max_k=max_k,
            restarts=restarts,
            random_seed=seed,
            threshold=threshold,
            max_iter=max_iter,
            n_jobs=n_jobs,
        )
    except (WineclusterError, ValueError) as exc:
        _fail(exc)

    out = Table(title="Hartigan's rule")
    out.add_column("k", justify="right")
    out.add_column("Total SS", justify="right")
    out.add_column("H(k)", justify="right")
    for row in report.rows:
        h = "-" if row.hartigan_index is None else f"{row.hartigan_index:.2f}"
        style = "bold green" if row.k == report.recommended_k else None
        out.add_row(str(row.k), f"{row.total_ss:.3f}", h, style=style)
    console.print(out)

    if report.inconclusive:
        console.print(
            f"[yellow]Inconclusive[/yellow]: no H(k) <= {report.threshold:g}; k >= {report.recommended_k}"
        )
    else:
        console.print(f"[green]OK[/green] recommended k={report.recommended_k}")


@app.command("run")
def run_pipeline(
    config: str = typer.Option(..., "--config", "-c", help="Path to configs/wine.yaml"),
    run_id: str | None = typer.Option(None, "--run-id", help="Run directory name (default: UTC timestamp)."),
) -> None:
    """Run the configured analysis and write tables + report under the results directory."""
    config_path = Path(config).resolve()
    try:
        cfg = load_config(config_path)
    except (OSError, yaml.YAMLError) as exc:
        _fail(exc, code=2)
    except ValueError as exc:
        _fail(exc)

    try:
        outputs = run_analysis(cfg, config_path=config_path, run_id=run_id)
    except OSError as exc:
        _fail(exc, code=2)
    except (WineclusterError, ValueError) as exc:
        _fail(exc)

    console.print(f"[green]OK[/green] run complete: {outputs.run_id} (k={outputs.result.k})")
    for name, path in outputs.files.items():
        console.print(f"{name}: {path}")


if __name__ == "__main__":
    app()
