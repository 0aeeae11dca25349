"""Analyzer facade tying collectors, classifier and rule families together."""

import asyncio
import logging
from typing import Optional

from .complexity_analysis import ComplexityClassifier, StructuredMetricsCollector, TextScanMetricsCollector
from .config import AnalyzerConfig
from .models import AnalysisOptions, AnalysisReport, CodeUnit, ComplexityResult, Issue, Metrics
from .rules import PERFORMANCE, SECURITY, RuleRegistry

logger = logging.getLogger(__name__)


class CodeAnalyzer:
    """Runs complexity, performance and security analysis on code units.

    The analysis itself is synchronous and holds no state between calls, so
    one analyzer can serve many threads. Which analyses run is decided per
    call through AnalysisOptions.
    """

    def __init__(self, config: Optional[AnalyzerConfig] = None):
        """Initialize the analyzer.

        Args:
            config: Analyzer configuration; defaults apply when omitted
        """
        self.config = config or AnalyzerConfig()
        self.structured_collector = StructuredMetricsCollector()
        self.text_collector = TextScanMetricsCollector()
        self.classifier = ComplexityClassifier()

    def collect_metrics(self, unit: CodeUnit) -> Metrics:
        """Collect metrics with the collector matching the unit's capabilities."""
        if unit.has_structure:
            return self.structured_collector.collect(unit)
        return self.text_collector.collect(unit)

    def analyze_complexity(self, unit: CodeUnit) -> ComplexityResult:
        return self.classifier.classify(self.collect_metrics(unit))

    def analyze_performance(self, unit: CodeUnit) -> Optional[Issue]:
        return RuleRegistry.evaluate(PERFORMANCE, unit, self.config.max_unit_size)

    def analyze_security(self, unit: CodeUnit) -> Optional[Issue]:
        return RuleRegistry.evaluate(SECURITY, unit, self.config.max_unit_size)

    def analyze(self, unit: CodeUnit, options: Optional[AnalysisOptions] = None) -> AnalysisReport:
        """Run the enabled analyses on one code unit.

        Args:
            unit: Code unit to analyze
            options: Analyses to run; the configured defaults when omitted

        Returns:
            AnalysisReport with a result for each enabled analysis
        """
        options = options or self.config.options
        report = AnalysisReport(unit_id=unit.id, language=unit.language)

        if options.complexity:
            metrics = self.collect_metrics(unit)
            report.complexity = self.classifier.classify(metrics)
            report.metadata["mode"] = metrics.mode.value
            report.metadata["metrics"] = metrics.to_dict()

        if options.performance:
            report.performance = self.analyze_performance(unit)

        if options.security:
            report.security = self.analyze_security(unit)

        logger.debug(f"Analyzed {unit.id}: {len(report.issues)} issue(s)")
        return report

    async def analyze_async(
        self,
        unit: CodeUnit,
        options: Optional[AnalysisOptions] = None,
        timeout: Optional[float] = None,
    ) -> AnalysisReport:
        """Run ``analyze`` in a worker thread, bounded by ``timeout`` seconds.

        Raises:
            asyncio.TimeoutError: If the analysis does not finish in time
        """
        return await asyncio.wait_for(asyncio.to_thread(self.analyze, unit, options), timeout=timeout)
