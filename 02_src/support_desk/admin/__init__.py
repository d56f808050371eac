"""Admin module."""

from .controller import AnalysisController, AnalysisView

__all__ = ["AnalysisController", "AnalysisView"]
