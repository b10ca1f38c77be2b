"""End-to-end analysis runs."""

from .analysis import AnalysisOutputs, run_analysis

__all__ = ["AnalysisOutputs", "run_analysis"]
