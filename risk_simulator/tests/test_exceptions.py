"""Tests for structured errors and logging helpers."""

import logging

import pytest

from risk_simulator.core.exceptions import (
    ErrorCategory,
    RiskSimulatorError,
    WorkerBusyError,
    WorkerCrashedError,
    handle_exception,
)
from risk_simulator.core.logging_config import LoggingContext, get_logger


class TestStructuredErrors:
    """Error payloads carry category, code and context."""

    def test_to_dict(self):
        error = WorkerCrashedError("worker died", exit_code=-15)
        payload = error.to_dict()

        assert payload['error_code'] == "RS_WORKERCRASHEDERROR"
        assert payload['category'] == ErrorCategory.CONCURRENCY.value
        assert payload['context']['exit_code'] == -15
        assert payload['exception_type'] == "WorkerCrashedError"

    def test_default_message(self):
        assert "already running" in str(WorkerBusyError())

    def test_handle_exception_wraps_and_reraises(self, caplog):
        logger = get_logger("tests")
        original = ValueError("bad value")

        with caplog.at_level(logging.ERROR, logger="risk_simulator.tests"):
            with pytest.raises(RiskSimulatorError) as exc_info:
                handle_exception(original, logger, context={"step": "x"})

        assert exc_info.value.cause is original
        assert exc_info.value.__cause__ is original
        assert exc_info.value.context == {"step": "x"}

    def test_handle_exception_keeps_simulator_errors(self):
        error = WorkerBusyError()
        with pytest.raises(WorkerBusyError) as exc_info:
            handle_exception(error, get_logger("tests"))
        assert exc_info.value is error

    def test_handle_exception_without_reraise(self):
        converted = handle_exception(KeyError("k"), get_logger("tests"), reraise=False)
        assert isinstance(converted, RiskSimulatorError)


class TestLoggingHelpers:
    """Logger naming and structured context."""

    def test_get_logger_namespace(self):
        assert get_logger("worker").name == "risk_simulator.worker"
        assert get_logger("risk_simulator.core.worker").name == "risk_simulator.core.worker"

    def test_logging_context_sets_record_fields(self):
        logger = get_logger("tests.context")
        with LoggingContext(logger, seed=7):
            record = logging.getLogRecordFactory()("x", logging.INFO, "f", 1, "msg", (), None)
        assert record.seed == 7

        after = logging.getLogRecordFactory()("x", logging.INFO, "f", 1, "msg", (), None)
        assert not hasattr(after, "seed")
