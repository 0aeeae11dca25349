"""Complexity estimation for single code units.

Two collectors gather Metrics (one over a structured tree, one over raw text)
and the classifier maps Metrics onto time and space complexity classes.
"""

from .classifier import ComplexityClassifier
from .structured_collector import StructuredMetricsCollector
from .text_collector import TextScanMetricsCollector

__all__ = [
    "ComplexityClassifier",
    "StructuredMetricsCollector",
    "TextScanMetricsCollector",
]
