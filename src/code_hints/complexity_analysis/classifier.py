"""Time and space complexity classification from collected metrics."""

import logging

from ..models import AnalysisMode, ComplexityResult, Metrics, SpaceClass, TimeClass

logger = logging.getLogger(__name__)


class ComplexityClassifier:
    """Turns Metrics into a ComplexityResult.

    The time class comes from an ordered cascade. Its predicates overlap, so
    the first match decides: nesting outranks sorting, recursion outranks
    nesting, and a permutation outranks everything.
    """

    def classify(self, metrics: Metrics) -> ComplexityResult:
        """Classify metrics into time class, space class and evidence.

        Args:
            metrics: Metrics from either collector

        Returns:
            ComplexityResult; never raises
        """
        return ComplexityResult(
            time_class=self.time_class(metrics),
            space_class=self.space_class(metrics),
            evidence=metrics.evidence(),
        )

    @staticmethod
    def time_class(metrics: Metrics) -> TimeClass:
        logarithmic = metrics.has_logarithmic_pattern or metrics.has_binary_search_pattern
        depth = metrics.max_nested_depth

        if metrics.has_factorial_pattern:
            return TimeClass.FACTORIAL
        if metrics.double_recursive_calls > 0 or metrics.recursive_calls >= 2:
            return TimeClass.EXPONENTIAL
        if depth >= 3:
            return TimeClass.CUBIC
        if depth == 2:
            return TimeClass.QUADRATIC
        if metrics.has_sorting_pattern:
            return TimeClass.LINEARITHMIC
        if depth == 1 and not logarithmic:
            return TimeClass.LINEAR
        if logarithmic and depth <= 1:
            return TimeClass.LOGARITHMIC
        if metrics.recursive_calls > 0 and metrics.loop_count == 0:
            return TimeClass.LINEAR
        if (
            metrics.mode is AnalysisMode.STRUCTURED
            and metrics.stream_ops >= 1
            and metrics.loop_count == 0
        ):
            return TimeClass.LINEAR
        if metrics.loop_count == 0 and metrics.stream_ops == 0 and metrics.recursive_calls == 0:
            return TimeClass.CONSTANT

        logger.debug(f"No complexity class matched: {metrics.to_dict()}")
        return TimeClass.UNCLASSIFIED

    @staticmethod
    def space_class(metrics: Metrics) -> SpaceClass:
        # Text mode cannot see allocations; recursion depth stands in for them
        if metrics.mode is AnalysisMode.TEXT:
            return SpaceClass.LINEAR if metrics.recursive_calls > 0 else SpaceClass.CONSTANT
        return SpaceClass.LINEAR if metrics.new_collections > 0 else SpaceClass.CONSTANT
