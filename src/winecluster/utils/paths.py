from __future__ import annotations

from pathlib import Path


def resolve_path(base_dir: Path, path_str: str) -> Path:
    path = Path(path_str)
    if path.is_absolute():
        return path
    return (base_dir / path).resolve()


def ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def project_root_from_config_path(config_path: Path) -> Path:
    # <repo>/configs/*.yaml -> project root is parent of configs/
    if config_path.parent.name == "configs":
        return config_path.parent.parent.resolve()
    return config_path.parent.resolve()


def sanitize_tag(tag: str) -> str:
    safe = [ch if ch.isalnum() or ch in {"-", "_", "."} else "_" for ch in tag]
    out = "".join(safe).strip("._")
    return out or "run"
