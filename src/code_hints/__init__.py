"""Code Hints - heuristic complexity, performance and security hints for functions."""

# Version tracking
__version__ = "0.1.0"

from .analyzer import CodeAnalyzer
from .cli import cli
from .config import AnalyzerConfig
from .locator import CodeLocator, build_unit
from .models import (
    AnalysisOptions,
    AnalysisReport,
    CodeUnit,
    ComplexityResult,
    Issue,
    IssueCategory,
    Metrics,
    Severity,
    SpaceClass,
    TimeClass,
)

# Expose main components
__all__ = [
    "cli",
    "AnalysisOptions",
    "AnalysisReport",
    "AnalyzerConfig",
    "CodeAnalyzer",
    "CodeLocator",
    "CodeUnit",
    "ComplexityResult",
    "Issue",
    "IssueCategory",
    "Metrics",
    "Severity",
    "SpaceClass",
    "TimeClass",
    "build_unit",
    "__version__",
]
