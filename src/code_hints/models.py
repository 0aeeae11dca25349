"""Data models for code characteristic analysis.

Provides the records exchanged between the metrics collectors, the complexity
classifier, the rule families and whatever renders their output.
"""

from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property
from typing import Any, Dict, List, Optional

from .syntax import SyntaxNode


class AnalysisMode(Enum):
    """Which metrics collector produced a Metrics record."""

    STRUCTURED = "structured"
    TEXT = "text"


class TimeClass(Enum):
    """Closed set of time complexity classes.

    UNCLASSIFIED is a regular member meaning "insufficient signal".
    """

    CONSTANT = "O(1)"
    LOGARITHMIC = "O(log n)"
    LINEAR = "O(n)"
    LINEARITHMIC = "O(n log n)"
    QUADRATIC = "O(n²)"
    CUBIC = "O(n³)"
    EXPONENTIAL = "O(2ⁿ)"
    FACTORIAL = "O(n!)"
    UNCLASSIFIED = "O(?)"


class SpaceClass(Enum):
    """Space complexity classes."""

    CONSTANT = "O(1)"
    LINEAR = "O(n)"


class Severity(Enum):
    """Severity of a performance or security finding."""

    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class IssueCategory(Enum):
    """Kinds of findings produced by the rule families."""

    # Performance
    N_PLUS_ONE_QUERY = "n_plus_one_query"
    INEFFICIENT_COLLECTION_OPS = "inefficient_collection_ops"
    MEMORY_LEAK_RISK = "memory_leak_risk"
    BLOCKING_MAIN_THREAD = "blocking_main_thread"
    LARGE_ALLOCATION = "large_allocation"
    BOXING_OVERHEAD = "boxing_overhead"

    # Security
    SQL_INJECTION = "sql_injection"
    HARDCODED_CREDENTIALS = "hardcoded_credentials"
    PATH_TRAVERSAL = "path_traversal"
    INSECURE_RANDOM = "insecure_random"
    COMMAND_INJECTION = "command_injection"
    XSS = "xss"


@dataclass(frozen=True)
class CodeUnit:
    """One function/method-sized span of source handed to the analyzers.

    The optional structured node is the unit's syntax subtree as produced by a
    language front end. Units are never mutated once built.
    """

    id: str
    language: str
    source_text: str
    structured_node: Optional[SyntaxNode] = None
    declared_name: str = ""

    @property
    def has_structure(self) -> bool:
        """Capability flag: True when a structured tree is attached."""
        return self.structured_node is not None

    @cached_property
    def lower_text(self) -> str:
        """Lower-cased source text used by the keyword rules."""
        return self.source_text.lower()

    @property
    def size(self) -> int:
        return len(self.source_text)


@dataclass
class Metrics:
    """Structural metrics accumulated over one code unit."""

    loop_count: int = 0
    max_nested_depth: int = 0
    recursive_calls: int = 0
    double_recursive_calls: int = 0
    stream_ops: int = 0
    new_collections: int = 0
    has_logarithmic_pattern: bool = False
    has_sorting_pattern: bool = False
    has_factorial_pattern: bool = False
    has_binary_search_pattern: bool = False
    mode: AnalysisMode = AnalysisMode.STRUCTURED

    def evidence(self) -> List[str]:
        """Raw metric values in display order."""
        lines = [
            f"Loops: {self.loop_count}",
            f"Max depth: {self.max_nested_depth}",
        ]
        if self.mode is AnalysisMode.STRUCTURED:
            lines.append(f"Streams: {self.stream_ops}")
        lines.append(f"Recursion: {self.recursive_calls}")
        lines.append(f"Double recursion: {self.double_recursive_calls}")
        if self.mode is AnalysisMode.STRUCTURED:
            lines.append(f"Collections: {self.new_collections}")
        return lines

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "loop_count": self.loop_count,
            "max_nested_depth": self.max_nested_depth,
            "recursive_calls": self.recursive_calls,
            "double_recursive_calls": self.double_recursive_calls,
            "stream_ops": self.stream_ops,
            "new_collections": self.new_collections,
            "has_logarithmic_pattern": self.has_logarithmic_pattern,
            "has_sorting_pattern": self.has_sorting_pattern,
            "has_factorial_pattern": self.has_factorial_pattern,
            "has_binary_search_pattern": self.has_binary_search_pattern,
            "mode": self.mode.value,
        }


@dataclass(frozen=True)
class ComplexityResult:
    """Estimated time and space complexity for a code unit."""

    time_class: TimeClass
    space_class: SpaceClass
    evidence: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "time": self.time_class.value,
            "space": self.space_class.value,
            "evidence": list(self.evidence),
        }


@dataclass(frozen=True)
class Issue:
    """A single performance or security finding."""

    category: IssueCategory
    message: str
    severity: Severity

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "category": self.category.value,
            "message": self.message,
            "severity": self.severity.value,
        }


@dataclass(frozen=True)
class AnalysisOptions:
    """Per-call switches selecting which analyzers run."""

    complexity: bool = True
    performance: bool = True
    security: bool = True


@dataclass
class AnalysisReport:
    """Everything produced for one code unit in one call."""

    unit_id: str
    language: str
    complexity: Optional[ComplexityResult] = None
    performance: Optional[Issue] = None
    security: Optional[Issue] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def issues(self) -> List[Issue]:
        """Findings from both rule families, performance first."""
        return [issue for issue in (self.performance, self.security) if issue is not None]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "unit_id": self.unit_id,
            "language": self.language,
            "complexity": self.complexity.to_dict() if self.complexity else None,
            "performance": self.performance.to_dict() if self.performance else None,
            "security": self.security.to_dict() if self.security else None,
            "metadata": self.metadata,
        }
