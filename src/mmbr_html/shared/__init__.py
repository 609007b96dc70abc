"""Shared utilities for the HTML parsing pipeline.

This module provides configuration objects, diagnostic types, the exception
hierarchy and logging helpers used across all processing layers.
"""

from .config import (
    EndTagMatching,
    ParserConfig,
    TokenizerConfig,
    TreeConfig,
)
from .exceptions import (
    ConfigError,
    ConfigValidationError,
    HTMLParserError,
    TokenizerContractError,
    TreeStructureError,
    UnsupportedElementKindError,
)
from .logging import (
    CorrelationLogger,
    get_logger,
)
from .result import (
    DiagnosticEntry,
    DiagnosticSeverity,
    PerformanceMetrics,
)

__all__ = [
    "ConfigError",
    "ConfigValidationError",
    "CorrelationLogger",
    "DiagnosticEntry",
    "DiagnosticSeverity",
    "EndTagMatching",
    "HTMLParserError",
    "ParserConfig",
    "PerformanceMetrics",
    "TokenizerConfig",
    "TokenizerContractError",
    "TreeConfig",
    "TreeStructureError",
    "UnsupportedElementKindError",
    "get_logger",
]
