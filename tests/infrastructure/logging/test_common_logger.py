"""
Test module for service_common.infrastructure.logging.common_logger
"""

import inspect
import json
import logging
import re

import pytest
import structlog

from service_common.config.settings import LoggingSettings
from service_common.exceptions import LoggerPanic
from service_common.infrastructure.logging.common_logger import (
    CommonLogger,
    new_common_logger,
    request_id_context,
)
from service_common.infrastructure.logging.config import LOGGER_NAME
from service_common.infrastructure.logging.levels import Lvl


def _log_from_helper(handle: CommonLogger):
    handle.warn("from helper")


class TestNewCommonLogger:
    """Singleton construction and prefix handling."""

    def test_returns_same_instance(self):
        first = new_common_logger(settings=LoggingSettings())
        second = new_common_logger()

        assert first is second

    def test_second_prefix_replaces_first(self):
        first = new_common_logger("orders", settings=LoggingSettings())
        second = new_common_logger("payments")

        assert first is second
        assert first.prefix == "payments"

    def test_prefix_comparison_is_case_insensitive(self):
        handle = new_common_logger("Orders", settings=LoggingSettings())
        new_common_logger("ORDERS")

        assert handle.prefix == "Orders"

    def test_empty_prefix_keeps_stored_prefix(self):
        handle = new_common_logger("orders", settings=LoggingSettings())
        new_common_logger()
        new_common_logger("")

        assert handle.prefix == "orders"

    def test_first_call_uses_configured_prefix_and_level(self):
        settings = LoggingSettings(prefix="from-env", level="DEBUG")

        handle = new_common_logger(settings=settings)

        assert handle.prefix == "from-env"
        assert handle.level() == Lvl.DEBUG

    def test_settings_ignored_after_first_call(self):
        handle = new_common_logger(settings=LoggingSettings(level="ERROR"))
        new_common_logger(settings=LoggingSettings(level="DEBUG"))

        assert handle.level() == Lvl.ERROR


class TestDecoration:
    """Call-site, prefix and request id fields."""

    def test_source_points_at_caller(self, mocked_logger):
        handle, structlog_logger = mocked_logger

        line = inspect.currentframe().f_lineno + 1
        handle.info("hello")

        fields = structlog_logger.bind.call_args.kwargs
        assert fields["source"] == f"test_common_logger.py:{line}:test_source_points_at_caller()"

    def test_source_uses_short_function_name(self, mocked_logger):
        handle, structlog_logger = mocked_logger

        _log_from_helper(handle)

        source = structlog_logger.bind.call_args.kwargs["source"]
        assert source.startswith("test_common_logger.py:")
        assert source.endswith(":_log_from_helper()")

    def test_formatted_and_json_variants_report_same_caller(self, mocked_logger):
        handle, structlog_logger = mocked_logger

        handle.infof("value %d", 1)
        formatted = structlog_logger.bind.call_args.kwargs["source"]
        handle.infoj({"value": 1})
        as_json = structlog_logger.bind.call_args.kwargs["source"]

        assert formatted.endswith(":test_formatted_and_json_variants_report_same_caller()")
        assert as_json.endswith(":test_formatted_and_json_variants_report_same_caller()")

    def test_missing_caller_yields_empty_source(self, mocked_logger):
        handle, structlog_logger = mocked_logger

        handle.decorate(depth=10_000)

        assert structlog_logger.bind.call_args.kwargs["source"] == ""

    def test_prefix_and_request_id_omitted_when_empty(self, mocked_logger):
        handle, structlog_logger = mocked_logger

        handle.info("hello")

        fields = structlog_logger.bind.call_args.kwargs
        assert set(fields) == {"source"}

    def test_prefix_and_request_id_bound_when_set(self, mocked_logger):
        handle, structlog_logger = mocked_logger
        handle.set_prefix("svc")
        handle.request_id = "abc-123"

        handle.info("hello")

        fields = structlog_logger.bind.call_args.kwargs
        assert fields["prefix"] == "svc"
        assert fields["requestID"] == "abc-123"

    def test_request_id_is_context_scoped(self, mocked_logger):
        handle, _ = mocked_logger
        handle.request_id = "abc-123"

        assert request_id_context.get() == "abc-123"
        handle.request_id = None
        assert handle.request_id == ""

    def test_decorated_entry_is_a_fresh_bound_logger(self, common_logger):
        entry = common_logger.decorate()

        context = structlog.get_context(entry)
        assert context["prefix"] == "svc"
        assert "source" in context


class TestEmission:
    """Rendered output and level dispatch."""

    def test_info_renders_prefixed_layout(self, common_logger, log_stream):
        common_logger.info("hello", "world")

        line = log_stream.getvalue().strip()
        assert re.match(r"^\[\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\]  INFO svc: hello world ", line)
        assert "source=test_common_logger.py:" in line

    def test_print_logs_at_info(self, mocked_logger):
        handle, structlog_logger = mocked_logger

        handle.print("a", 1)

        structlog_logger.bind.return_value.info.assert_called_once_with("a 1")

    def test_format_variant(self, mocked_logger):
        handle, structlog_logger = mocked_logger

        handle.debugf("%s has %d items", "cart", 3)

        structlog_logger.bind.return_value.debug.assert_called_once_with("cart has 3 items")

    def test_format_without_args_is_left_untouched(self, mocked_logger):
        handle, structlog_logger = mocked_logger

        handle.infof("100% done")

        structlog_logger.bind.return_value.info.assert_called_once_with("100% done")

    def test_json_variant(self, mocked_logger):
        handle, structlog_logger = mocked_logger

        handle.warnj({"user": "u1", "count": 2})

        message = structlog_logger.bind.return_value.warning.call_args.args[0]
        assert json.loads(message) == {"user": "u1", "count": 2}

    def test_debug_filtered_at_info_level(self, common_logger, log_stream):
        common_logger.debug("hidden")

        assert log_stream.getvalue() == ""

    def test_warn_renders_warn_label(self, common_logger, log_stream):
        common_logger.warn("careful")

        assert " WARN svc: careful" in log_stream.getvalue()

    def test_structured_output(self, log_stream):
        from service_common.infrastructure.logging.config import ServiceLoggerConfig, get_logger

        config = ServiceLoggerConfig(structured=True, stream=log_stream)
        handle = CommonLogger(get_logger(), logging.getLogger(LOGGER_NAME), config.handler, prefix="svc")
        logging.getLogger(LOGGER_NAME).setLevel(logging.INFO)

        handle.info("hello")

        record = json.loads(log_stream.getvalue())
        assert record["event"] == "hello"
        assert record["level"] == "info"
        assert record["prefix"] == "svc"


class TestErrorForwarding:
    """Only the error, fatal and panic families reach the error tracker."""

    def test_error_forwards_once(self, common_logger, mock_sentry):
        common_logger.error("boom")

        mock_sentry.capture_message.assert_called_once()
        assert "boom" in mock_sentry.capture_message.call_args.args[0]

    @pytest.mark.parametrize("method", ["debug", "info", "print", "warn"])
    def test_lower_levels_do_not_forward(self, common_logger, mock_sentry, method):
        getattr(common_logger, method)("boom")

        mock_sentry.capture_message.assert_not_called()

    def test_warn_variants_do_not_forward(self, common_logger, mock_sentry):
        common_logger.warnf("boom %s", 1)
        common_logger.warnj({"msg": "boom"})

        mock_sentry.capture_message.assert_not_called()

    def test_errorf_forwards_rendered_message(self, common_logger, mock_sentry):
        common_logger.errorf("failed to load %s", "cart")

        mock_sentry.capture_message.assert_called_once_with("failed to load cart")

    def test_errorj_forwards_json(self, common_logger, mock_sentry):
        common_logger.errorj({"error": "boom"})

        mock_sentry.capture_message.assert_called_once_with('{"error": "boom"}')

    def test_forwarding_failure_is_swallowed(self, common_logger, mock_sentry, log_stream):
        mock_sentry.capture_message.side_effect = RuntimeError("transport down")

        common_logger.error("boom")

        assert "ERROR svc: boom" in log_stream.getvalue()

    def test_fatal_logs_forwards_and_exits(self, common_logger, mock_sentry, log_stream):
        with pytest.raises(SystemExit) as exc_info:
            common_logger.fatal("disk", "full")

        assert exc_info.value.code == 1
        mock_sentry.capture_message.assert_called_once_with("disk full")
        mock_sentry.flush.assert_called_once()
        assert "FATAL svc: disk full" in log_stream.getvalue()

    def test_fatalf_exits(self, common_logger, mock_sentry):
        with pytest.raises(SystemExit):
            common_logger.fatalf("code %d", 7)

        mock_sentry.capture_message.assert_called_once_with("code 7")

    def test_panic_raises_after_forwarding(self, common_logger, mock_sentry, log_stream):
        with pytest.raises(LoggerPanic, match="bad state"):
            common_logger.panic("bad state")

        mock_sentry.capture_message.assert_called_once_with("bad state")
        assert "PANIC svc: bad state" in log_stream.getvalue()

    def test_panicj_carries_payload(self, common_logger, mock_sentry):
        with pytest.raises(LoggerPanic) as exc_info:
            common_logger.panicj({"reason": "bad state"})

        assert exc_info.value.details == {"reason": "bad state"}


class TestFrameworkInterface:
    """Level translation and accepted no-ops."""

    def test_set_level_round_trips_warn(self, common_logger):
        common_logger.set_level(Lvl.WARN)

        assert common_logger.level() == Lvl.WARN
        assert logging.getLogger(LOGGER_NAME).level == logging.WARNING

    def test_unmapped_internal_level_reads_as_off(self, common_logger):
        logging.getLogger(LOGGER_NAME).setLevel(logging.CRITICAL)

        assert common_logger.level() == Lvl.OFF

    def test_unrecognized_inbound_level_sets_info(self, common_logger):
        common_logger.set_level(Lvl.ERROR)
        common_logger.set_level(Lvl.OFF)
        assert common_logger.level() == Lvl.INFO

        common_logger.set_level(42)
        assert common_logger.level() == Lvl.INFO

    def test_set_output_and_header_are_noops(self, common_logger, log_stream):
        other = object()

        common_logger.set_output(other)
        common_logger.set_header("${time_rfc3339}")
        common_logger.info("still here")

        assert common_logger.output() is log_stream
        assert "still here" in log_stream.getvalue()
