"""Context variables for structured logging."""

from contextvars import ContextVar
from typing import Dict, Optional

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")
_data_source: ContextVar[str] = ContextVar("data_source", default="")
_operation: ContextVar[str] = ContextVar("operation", default="")


def set_log_context(
    correlation_id: Optional[str] = None,
    data_source: Optional[str] = None,
    operation: Optional[str] = None,
) -> None:
    if correlation_id is not None:
        _correlation_id.set(correlation_id)
    if data_source is not None:
        _data_source.set(data_source)
    if operation is not None:
        _operation.set(operation)


def get_log_context() -> Dict[str, str]:
    return {
        "correlation_id": _correlation_id.get(),
        "data_source": _data_source.get(),
        "operation": _operation.get(),
    }


def clear_log_context() -> None:
    _correlation_id.set("")
    _data_source.set("")
    _operation.set("")
