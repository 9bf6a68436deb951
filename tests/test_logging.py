"""Tests for the structured logging system (campaign_kernel/logging_config.py)."""

import json
import logging
from decimal import Decimal
from io import StringIO
from uuid import uuid4

import pytest

from campaign_engines.allocation import AllocationValidator
from campaign_kernel.domain.dtos import TeamAllocation
from campaign_kernel.exceptions import AllocationExceededError
from campaign_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests, then restore the suite's setup."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()
    configure_logging(level=logging.DEBUG, stream=StringIO())


def _make_handler() -> tuple[logging.Handler, StringIO]:
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    return handler, stream


def _parse_log(stream: StringIO) -> dict:
    """Parse the first JSON log line from a stream."""
    line = stream.getvalue().strip().split("\n")[0]
    return json.loads(line)


def _parse_all_logs(stream: StringIO) -> list[dict]:
    lines = stream.getvalue().strip().split("\n")
    return [json.loads(line) for line in lines if line]


# ---------------------------------------------------------------------------
# StructuredFormatter tests
# ---------------------------------------------------------------------------


class TestStructuredFormatter:
    """Tests for JSON log output format."""

    def test_basic_json_output(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("hello")

        record = _parse_log(stream)
        assert record["level"] == "INFO"
        assert record["message"] == "hello"
        assert record["logger"] == "campaign_kernel.test"
        assert "ts" in record

    def test_extra_fields_and_decimals(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("allocated", extra={"rows": 3, "total": Decimal("10.50")})

        record = _parse_log(stream)
        assert record["rows"] == 3
        assert record["total"] == "10.50"

    def test_decimals_keep_plain_notation(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info(
            "totals", extra={"planned": Decimal("1E+3"), "tiny": Decimal("1E-9")}
        )

        record = _parse_log(stream)
        assert record["planned"] == "1000"
        assert record["tiny"] == "0.000000001"

    def test_dataclasses_rendered_field_by_field(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        team = uuid4()
        row = TeamAllocation(team_id=team, allocation=Decimal("250.00"))
        get_logger("test").info("rows", extra={"rows": (row,)})

        rendered = _parse_log(stream)["rows"]
        assert rendered[0]["team_id"] == str(team)
        assert rendered[0]["allocation"] == "250.00"

    def test_report_with_to_dict(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        check = AllocationValidator().validate(
            budget_id=None,
            budget_amount=Decimal("1000.00"),
            proposed=[(uuid4(), Decimal("400.00"))],
        )
        get_logger("test").info("checked", extra={"check": check})

        rendered = _parse_log(stream)["check"]
        assert rendered["headroom"] == "600.00"
        assert rendered["exceeds_amount"] is False

    def test_context_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        LogContext.set(run_id="run-1", command="rollup", campaign_id="cmp-1")
        get_logger("test").info("test_msg")

        record = _parse_log(stream)
        assert record["run_id"] == "run-1"
        assert record["command"] == "rollup"
        assert record["campaign_id"] == "cmp-1"
        assert "budget_id" not in record

    def test_kernel_exception_fields(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        try:
            raise AllocationExceededError(Decimal("1050"), Decimal("1000"), "b-1")
        except AllocationExceededError:
            get_logger("test").error("allocation_failed", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_code"] == "ALLOCATION_EXCEEDED"
        assert record["exc_type"] == "AllocationExceededError"
        assert record["exc_total_allocated"] == "1050"
        assert record["exc_budget_amount"] == "1000"
        assert "traceback" in record

    def test_uuid_serialized(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        uid = uuid4()
        get_logger("test").info("with_uuid", extra={"team_id": uid})

        assert _parse_log(stream)["team_id"] == str(uid)

    def test_debug_filtered_at_info(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("first")
        logger.warning("second")
        logger.debug("third")

        assert [r["message"] for r in _parse_all_logs(stream)] == ["first", "second"]


# ---------------------------------------------------------------------------
# LogContext tests
# ---------------------------------------------------------------------------


class TestLogContext:

    def test_bind_restores_previous(self):
        LogContext.set(budget_id="outer")
        with LogContext.bind(budget_id="inner"):
            assert LogContext.get_all()["budget_id"] == "inner"
        assert LogContext.get_all()["budget_id"] == "outer"

    def test_bind_converts_to_str(self):
        uid = uuid4()
        with LogContext.bind(campaign_id=uid):
            assert LogContext.get_all()["campaign_id"] == str(uid)
        assert "campaign_id" not in LogContext.get_all()

    def test_clear(self):
        LogContext.set(run_id="x", budget_id="b")
        LogContext.clear()
        assert LogContext.get_all() == {}

    def test_unknown_field_rejected(self):
        with pytest.raises(TypeError, match="actor_id"):
            LogContext.set(actor_id="x")
        with pytest.raises(TypeError):
            with LogContext.bind(trace_id="t"):
                pass

    def test_bind_restores_on_error(self):
        with pytest.raises(RuntimeError):
            with LogContext.bind(command="kpis"):
                raise RuntimeError("boom")
        assert "command" not in LogContext.get_all()


# ---------------------------------------------------------------------------
# configure_logging tests
# ---------------------------------------------------------------------------


class TestConfigureLogging:

    def test_idempotent(self):
        h1, _ = _make_handler()
        configure_logging(handler=h1)
        h2, _ = _make_handler()
        configure_logging(handler=h2)
        handlers = logging.getLogger("campaign_kernel").handlers
        assert h1 in handlers
        assert h2 not in handlers

    def test_reset_removes_only_installed_handler(self):
        installed, _ = _make_handler()
        configure_logging(handler=installed)
        other, _ = _make_handler()
        kernel_logger = logging.getLogger("campaign_kernel")
        kernel_logger.addHandler(other)
        try:
            reset_logging()
            assert installed not in kernel_logger.handlers
            assert other in kernel_logger.handlers
        finally:
            kernel_logger.removeHandler(other)

    def test_string_level(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler, level="WARNING")
        get_logger("test").info("hidden")
        assert stream.getvalue() == ""

    def test_get_logger_returns_child(self):
        assert get_logger("services.allocation").name == "campaign_kernel.services.allocation"
