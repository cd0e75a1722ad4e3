"""
Structured JSON logging for the ledger kernel.

Every kernel and module logger lives under the ``ledger_kernel`` namespace
and writes one JSON object per line.  Request-scoped fields (tenant, actor,
entry, source document) are carried by ``LogContext`` and merged into every
record emitted while they are bound, so services log events such as
``journal_entry_approved`` without repeating who and what in each call.

Usage::

    configure_logging(level=logging.INFO)
    logger = get_logger("services.journal")
    with LogContext.bind(tenant_id=tenant_id, actor_id=user_id):
        logger.info("journal_entry_created", extra={"number": number})
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from decimal import Decimal
from types import MappingProxyType
from typing import Any
from uuid import UUID

NAMESPACE = "ledger_kernel"

CONTEXT_FIELDS: tuple[str, ...] = (
    "correlation_id",
    "tenant_id",
    "actor_id",
    "entry_id",
    "source_type",
    "source_doc_id",
)

_EMPTY: Mapping[str, str] = MappingProxyType({})

# One immutable mapping per execution context; updates replace it.
_context: ContextVar[Mapping[str, str]] = ContextVar("ledger_log_context", default=_EMPTY)


def _known_fields(fields: Mapping[str, Any]) -> dict[str, str]:
    return {
        name: str(value)
        for name, value in fields.items()
        if name in CONTEXT_FIELDS and value is not None
    }


class LogContext:
    """Request-scoped fields added to every ledger log record."""

    @staticmethod
    def set(**fields: Any) -> None:
        """
        Merge ``fields`` into the current context.

        None values leave the existing field untouched.

        Raises:
            TypeError: if a field name is not a context field.
        """
        unknown = set(fields) - set(CONTEXT_FIELDS)
        if unknown:
            raise TypeError(f"Unknown log context fields: {sorted(unknown)}")
        merged = {**_context.get(), **_known_fields(fields)}
        _context.set(MappingProxyType(merged))

    @staticmethod
    def get_all() -> dict[str, str]:
        return dict(_context.get())

    @staticmethod
    def clear() -> None:
        _context.set(_EMPTY)

    @staticmethod
    @contextmanager
    def bind(**fields: Any) -> Iterator[None]:
        """
        Bind fields for the duration of a ``with`` block.

        Unknown names and None values are ignored; the previous context is
        restored on exit, including on error.
        """
        token = _context.set(MappingProxyType({**_context.get(), **_known_fields(fields)}))
        try:
            yield
        finally:
            _context.reset(token)


# ---------------------------------------------------------------------------
# Formatter
# ---------------------------------------------------------------------------

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RECORD_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}


def _json_default(value: Any) -> Any:
    if isinstance(value, (UUID, Decimal)):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    return str(value)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    """exc_* fields for a logged exception, including LedgerError attributes."""
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    for name, value in vars(exc).items():
        if not name.startswith("_") and name != "code":
            fields[f"exc_{name}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """One JSON object per record: core fields, context, extras, exception."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }
        for name, value in vars(record).items():
            if name not in _RECORD_ATTRS:
                payload.setdefault(name, value)

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_json_default)


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------


def get_logger(name: str) -> logging.Logger:
    """Logger ``ledger_kernel.<name>``."""
    return logging.getLogger(f"{NAMESPACE}.{name}")


_setup_lock = threading.Lock()
_handler: logging.Handler | None = None


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach the JSON handler to the ``ledger_kernel`` logger.

    Only the first call takes effect until ``reset_logging``.  The namespace
    does not propagate to the root logger, so host applications keep their
    own formatting.
    """
    global _handler
    with _setup_lock:
        if _handler is not None:
            return
        _handler = handler or logging.StreamHandler(stream or sys.stderr)
        _handler.setFormatter(StructuredFormatter())

        namespace = logging.getLogger(NAMESPACE)
        namespace.setLevel(level)
        namespace.propagate = False
        namespace.addHandler(_handler)


def reset_logging() -> None:
    """Detach the JSON handler so the next configure_logging applies (tests)."""
    global _handler
    with _setup_lock:
        namespace = logging.getLogger(NAMESPACE)
        if _handler is not None:
            namespace.removeHandler(_handler)
            _handler = None
        namespace.setLevel(logging.WARNING)
