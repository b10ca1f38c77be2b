"""Shared utilities (paths, run ids)."""

from .paths import ensure_dir, project_root_from_config_path, resolve_path, sanitize_tag

__all__ = ["ensure_dir", "project_root_from_config_path", "resolve_path", "sanitize_tag"]
