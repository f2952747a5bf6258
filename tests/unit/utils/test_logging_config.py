"""Tests for logging setup."""

import logging

from tabedit.utils.logging_config import (
    CorrelationIdFilter,
    get_correlation_id,
    set_correlation_id,
    setup_logging,
)


class TestCorrelationId:
    """Test correlation id handling."""

    def test_generated_id(self) -> None:
        correlation_id = set_correlation_id()
        assert len(correlation_id) == 12
        assert get_correlation_id() == correlation_id

    def test_explicit_id(self) -> None:
        assert set_correlation_id("run-1") == "run-1"

    def test_filter_sets_attribute(self) -> None:
        set_correlation_id("run-2")
        record = logging.LogRecord("tabedit", logging.INFO, __file__, 1, "msg", None, None)
        assert CorrelationIdFilter().filter(record)
        assert record.correlation_id == "run-2"


class TestSetupLogging:
    """Test logger configuration."""

    def test_single_handler(self) -> None:
        setup_logging("debug")
        setup_logging("warning")
        logger = logging.getLogger("tabedit")
        assert len(logger.handlers) == 1
        assert logger.level == logging.WARNING
        assert not logger.propagate
