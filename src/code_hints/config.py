"""Configuration for code-hints."""

import logging
import os
from dataclasses import dataclass, field

from .models import AnalysisOptions
from .rules.engine import MAX_UNIT_SIZE

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")

TRUE_VALUES = ("1", "true", "yes", "on")
FALSE_VALUES = ("0", "false", "no", "off")


def parse_bool(value: str, name: str) -> bool:
    """
    Parse a boolean environment value.

    Raises:
        ValueError: If the value is not a recognised boolean spelling
    """
    normalized = value.strip().lower()
    if normalized in TRUE_VALUES:
        return True
    if normalized in FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be one of {TRUE_VALUES + FALSE_VALUES}, got {value!r}")


@dataclass
class AnalyzerConfig:
    """Main configuration for code-hints."""

    max_unit_size: int = MAX_UNIT_SIZE
    options: AnalysisOptions = field(default_factory=AnalysisOptions)
    log_level: str = "WARNING"

    def __post_init__(self):
        """Validate values."""
        if self.max_unit_size <= 0:
            raise ValueError(f"max_unit_size must be positive, got {self.max_unit_size}")
        self.log_level = self.log_level.upper()
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {LOG_LEVELS}, got {self.log_level!r}")

    @property
    def logging_level(self) -> int:
        return getattr(logging, self.log_level)

    @classmethod
    def from_env(cls) -> "AnalyzerConfig":
        """Create configuration from environment variables."""
        size = os.getenv("CODE_HINTS_MAX_UNIT_SIZE", str(MAX_UNIT_SIZE))
        try:
            max_unit_size = int(size)
        except ValueError:
            raise ValueError(f"CODE_HINTS_MAX_UNIT_SIZE must be an integer, got {size!r}") from None

        return cls(
            max_unit_size=max_unit_size,
            options=AnalysisOptions(
                complexity=parse_bool(os.getenv("CODE_HINTS_COMPLEXITY", "true"), "CODE_HINTS_COMPLEXITY"),
                performance=parse_bool(os.getenv("CODE_HINTS_PERFORMANCE", "true"), "CODE_HINTS_PERFORMANCE"),
                security=parse_bool(os.getenv("CODE_HINTS_SECURITY", "true"), "CODE_HINTS_SECURITY"),
            ),
            log_level=os.getenv("CODE_HINTS_LOG_LEVEL", "WARNING"),
        )
