"""Tables and the markdown summary written for each run."""

from .report import (
    assignments_frame,
    centroids_frame,
    write_run_markdown_report,
)

__all__ = ["assignments_frame", "centroids_frame", "write_run_markdown_report"]
