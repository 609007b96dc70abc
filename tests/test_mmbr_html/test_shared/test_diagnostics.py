"""Tests for diagnostics, metrics and logging helpers."""

import logging

import pytest

from mmbr_html.shared import (
    CorrelationLogger,
    DiagnosticEntry,
    DiagnosticSeverity,
    PerformanceMetrics,
    get_logger,
)


class TestDiagnosticEntry:
    """Test DiagnosticEntry validation and conversion."""

    def test_validation(self):
        """Test message and component are required."""
        with pytest.raises(ValueError, match="Diagnostic message cannot be empty"):
            DiagnosticEntry(DiagnosticSeverity.INFO, "", "tree")
        with pytest.raises(ValueError, match="Diagnostic component cannot be empty"):
            DiagnosticEntry(DiagnosticSeverity.INFO, "message", "")

    def test_to_dict(self):
        """Test optional fields are only included when set."""
        entry = DiagnosticEntry(DiagnosticSeverity.WARNING, "skipped", "tree")
        assert entry.to_dict() == {
            "severity": "WARNING",
            "message": "skipped",
            "component": "tree",
        }

        entry = DiagnosticEntry(
            DiagnosticSeverity.ERROR,
            "too deep",
            "tree",
            position={"line": 1, "column": 2, "offset": 1},
            details={"max_tree_depth": 4},
        )
        data = entry.to_dict()
        assert data["position"]["column"] == 2
        assert data["details"] == {"max_tree_depth": 4}


class TestPerformanceMetrics:
    """Test derived throughput figures."""

    def test_rates(self):
        """Test per-second rates."""
        metrics = PerformanceMetrics(
            processing_time_ms=500.0, characters_processed=100, tokens_consumed=50
        )
        assert metrics.characters_per_second == 200.0
        assert metrics.tokens_per_second == 100.0

    def test_zero_time(self):
        """Test rates are zero before any time has been measured."""
        metrics = PerformanceMetrics(tokens_consumed=10)
        assert metrics.tokens_per_second == 0.0
        assert metrics.characters_per_second == 0.0


class TestCorrelationLogger:
    """Test correlation-aware logging."""

    def test_get_logger(self):
        """Test the factory wires name and component."""
        logger = get_logger("mmbr_html.test", "cid-1", "unit")
        assert isinstance(logger, CorrelationLogger)
        assert logger.logger.name == "mmbr_html.test"
        assert logger.component == "unit"

    def test_component_defaults_to_module_name(self):
        """Test the last dotted part is used as component."""
        assert get_logger("mmbr_html.tree.builder").component == "builder"

    def test_records_carry_correlation(self, caplog):
        """Test records carry correlation ID, component and extras."""
        logger = get_logger("mmbr_html.test", "cid-2", "unit")
        with caplog.at_level(logging.INFO, logger="mmbr_html.test"):
            logger.info("hello", extra={"mode": "IN_BODY"})

        record = caplog.records[-1]
        assert record.message == "hello"
        assert record.correlation_id == "cid-2"
        assert record.component == "unit"
        assert record.mode == "IN_BODY"

    def test_is_enabled_for(self):
        """Test level checks are delegated."""
        logger = get_logger("mmbr_html.level_check")
        logger.logger.setLevel(logging.ERROR)
        try:
            assert logger.is_enabled_for(logging.ERROR)
            assert not logger.is_enabled_for(logging.DEBUG)
        finally:
            logger.logger.setLevel(logging.NOTSET)

    def test_bind_adds_context(self, caplog):
        """Test bound context is stamped on records without changing the parent."""
        logger = get_logger("mmbr_html.test", "cid-3", "unit")
        bound = logger.bind(mode="IN_BODY", line=2).bind(column=5)

        with caplog.at_level(logging.WARNING, logger="mmbr_html.test"):
            bound.warning("skipped", extra={"column": 6})
            logger.warning("plain")

        skipped, plain = caplog.records[-2:]
        assert skipped.mode == "IN_BODY"
        assert skipped.line == 2
        assert skipped.column == 6
        assert skipped.correlation_id == "cid-3"
        assert not hasattr(plain, "mode")
        assert logger.context == {}

    def test_disabled_level_emits_nothing(self, caplog):
        """Test records below the logger level are not emitted."""
        logger = get_logger("mmbr_html.test")
        with caplog.at_level(logging.WARNING, logger="mmbr_html.test"):
            logger.debug("hidden")
        assert not any(r.getMessage() == "hidden" for r in caplog.records)
