from __future__ import annotations

from pathlib import Path

from typer.testing import CliRunner

from winecluster.cli import app

runner = CliRunner()


def test_fit_command_prints_crosstab() -> None:
    result = runner.invoke(app, ["fit", "--k", "3", "--restarts", "2", "--seed", "1"])
    assert result.exit_code == 0, result.output
    assert "total within-cluster SS" in result.output
    assert "Adjusted Rand index" in result.output


def test_select_k_command() -> None:
    result = runner.invoke(app, ["select-k", "--max-k", "3", "--restarts", "2"])
    assert result.exit_code == 0, result.output
    assert "Hartigan" in result.output


def test_invalid_k_exits_with_error() -> None:
    result = runner.invoke(app, ["fit", "--k", "0"])
    assert result.exit_code == 1
    assert "ERROR" in result.output


def test_run_command(tmp_path: Path) -> None:
    config_path = tmp_path / "wine.yaml"
    config_path.write_text(
        "clustering:\n  k_strategy: fixed\n  k_fixed: 3\n  restarts: 2\npaths:\n  results_dir: results\n",
        encoding="utf-8",
    )
    result = runner.invoke(app, ["run", "--config", str(config_path), "--run-id", "cli"])
    assert result.exit_code == 0, result.output
    assert (tmp_path / "results" / "cli" / "run_meta.json").exists()


def test_unknown_log_level_exits_with_error() -> None:
    result = runner.invoke(app, ["--log-level", "LOUD", "fit", "--k", "3"])
    assert result.exit_code == 2
    assert "ERROR" in result.output
    assert "LOUD" in result.output


def test_run_with_missing_config_exits_with_error(tmp_path: Path) -> None:
    result = runner.invoke(app, ["run", "--config", str(tmp_path / "missing.yaml")])
    assert result.exit_code == 2
    assert "ERROR" in result.output


def test_run_with_malformed_yaml_exits_with_error(tmp_path: Path) -> None:
    config_path = tmp_path / "wine.yaml"
    config_path.write_text("clustering: [unclosed\n", encoding="utf-8")
    result = runner.invoke(app, ["run", "--config", str(config_path)])
    assert result.exit_code == 2
    assert "ERROR" in result.output
