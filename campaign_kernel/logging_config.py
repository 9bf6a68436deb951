"""
Structured JSON logging for the campaign kernel.

Every record under the ``campaign_kernel`` logger becomes one JSON line:

    {"ts": "...", "level": "INFO", "logger": "campaign_kernel.services.allocation",
     "message": "allocations_set", "run_id": "9c1e...", "command": "rollup",
     "budget_id": "...", "total_allocated": "900.00"}

Context fields come from LogContext and are set at the entry points:

    run_id       one per CLI invocation (scripts/campaign_report.py)
    command      the CLI subcommand being run
    campaign_id  bound by the reporting and campaign services
    budget_id    bound by the allocation service

Values are rendered so report figures survive the trip intact: Decimals in
plain notation with their scale kept ("1000.00", never "1.000E+3"), UUIDs
and enums as strings, report DTOs through their ``to_dict()`` and other
dataclasses field by field.
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import dataclasses
import json
import logging
import sys
import threading
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Iterator
from uuid import UUID

_LOGGER_PREFIX = "campaign_kernel"


class LogContext:
    """Per-thread / per-task log fields, read by StructuredFormatter."""

    _vars: dict[str, ContextVar[str | None]] = {
        name: ContextVar(f"campaign_log_{name}", default=None)
        for name in ("run_id", "command", "campaign_id", "budget_id")
    }

    @classmethod
    def _var(cls, name: str) -> ContextVar[str | None]:
        try:
            return cls._vars[name]
        except KeyError:
            raise TypeError(f"Unknown log context field: {name!r}") from None

    @classmethod
    def set(cls, **fields: Any) -> None:
        """Set fields for the rest of the current context. None is skipped."""
        for name, value in fields.items():
            var = cls._var(name)
            if value is not None:
                var.set(str(value))

    @classmethod
    def get_all(cls) -> dict[str, str]:
        return {
            name: value
            for name, var in cls._vars.items()
            if (value := var.get()) is not None
        }

    @classmethod
    def clear(cls) -> None:
        for var in cls._vars.values():
            var.set(None)

    @classmethod
    @contextmanager
    def bind(cls, **fields: Any) -> Iterator[type["LogContext"]]:
        """Set fields inside a ``with`` block and restore the previous values."""
        resolved = [(cls._var(name), value) for name, value in fields.items()]
        tokens = [(var, var.set(str(value))) for var, value in resolved if value is not None]
        try:
            yield cls
        finally:
            for var, token in reversed(tokens):
                var.reset(token)


def _render(value: Any) -> Any:
    """Turn a log value into something json can write without losing digits."""
    if isinstance(value, Decimal):
        return format(value, "f") if value.is_finite() else str(value)
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Enum):
        return _render(value.value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if hasattr(value, "to_dict") and callable(value.to_dict):
        return _render(value.to_dict())
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return _render(dataclasses.asdict(value))
    if isinstance(value, dict):
        return {str(k): _render(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_render(v) for v in value]
    return value


_RESERVED: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}


class StructuredFormatter(logging.Formatter):
    """One JSON object per record: header, context, extras, then the error."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(LogContext.get_all())

        for key, value in vars(record).items():
            if key not in _RESERVED and key not in payload:
                payload[key] = _render(value)

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(self._exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)

    @staticmethod
    def _exception_fields(exc: BaseException) -> dict[str, Any]:
        # CampaignKernelError subclasses carry a code and structured attributes.
        fields: dict[str, Any] = {
            "exc_type": type(exc).__name__,
            "exc_message": str(exc),
        }
        code = getattr(exc, "code", None)
        if code is not None:
            fields["exc_code"] = code
        for name, value in vars(exc).items():
            if not name.startswith("_"):
                fields[f"exc_{name}"] = _render(value)
        return fields


def get_logger(name: str) -> logging.Logger:
    """Logger under the campaign_kernel namespace, e.g. ``services.allocation``."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


_state_lock = threading.Lock()
_installed_handler: logging.Handler | None = None


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Install one JSON handler on the ``campaign_kernel`` logger.

    Only the first call takes effect until reset_logging(); later calls
    (engine init, the CLI, tests) leave the installed handler in place.
    """
    global _installed_handler
    with _state_lock:
        if _installed_handler is not None:
            return
        target = handler if handler is not None else logging.StreamHandler(stream or sys.stderr)
        target.setFormatter(StructuredFormatter())

        kernel_logger = logging.getLogger(_LOGGER_PREFIX)
        kernel_logger.setLevel(level.upper() if isinstance(level, str) else level)
        kernel_logger.propagate = False
        kernel_logger.addHandler(target)
        _installed_handler = target


def reset_logging() -> None:
    """Remove the installed handler so configure_logging() can run again. Tests only."""
    global _installed_handler
    with _state_lock:
        kernel_logger = logging.getLogger(_LOGGER_PREFIX)
        if _installed_handler is not None:
            kernel_logger.removeHandler(_installed_handler)
            _installed_handler = None
        kernel_logger.setLevel(logging.WARNING)
