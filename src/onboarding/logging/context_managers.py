"""Context managers for structured logging."""

import logging
import time
from typing import Any, Dict, Optional

from onboarding.logging.context import get_log_context, set_log_context
from onboarding.logging.utilities import log_exception, log_with_context


class LogContext:
    """
    Context manager for temporary log context.

    Usage:
        with LogContext(data_source="products", correlation_id=str(cid)):
            # All logs in this block carry data_source and correlation_id
            await submit()
    """

    def __init__(
        self,
        correlation_id: Optional[str] = None,
        data_source: Optional[str] = None,
        operation: Optional[str] = None,
    ):
        self.new_context = {
            "correlation_id": correlation_id,
            "data_source": data_source,
            "operation": operation,
        }
        self.old_context: Dict[str, str] = {}

    def __enter__(self) -> "LogContext":
        self.old_context = get_log_context()
        for key, value in self.new_context.items():
            if value is not None:
                set_log_context(**{key: value})
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        set_log_context(**self.old_context)
        return False


class OperationContext:
    """Context manager for timed operations with automatic logging."""

    def __init__(
        self,
        logger: logging.Logger,
        operation: str,
        level: int = logging.DEBUG,
        slow_threshold_ms: Optional[float] = 2000.0,
        **context: Any,
    ):
        self.logger = logger
        self.operation = operation
        self.level = level
        self.slow_threshold_ms = slow_threshold_ms
        self.context = context
        self._start_time: Optional[float] = None

    def __enter__(self) -> "OperationContext":
        self._start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration_ms = (time.perf_counter() - self._start_time) * 1000

        # Auto-promote to INFO if slow
        effective_level = self.level
        if self.slow_threshold_ms and duration_ms > self.slow_threshold_ms:
            effective_level = max(self.level, logging.INFO)

        if isinstance(exc_val, Exception):
            log_exception(
                self.logger,
                exc_val,
                f"Failed: {self.operation}",
                level=logging.WARNING,
                include_traceback=False,
                duration_ms=round(duration_ms, 2),
                operation=self.operation,
                **self.context,
            )
        elif exc_val is None:
            log_with_context(
                self.logger,
                effective_level,
                f"Completed: {self.operation}",
                duration_ms=round(duration_ms, 2),
                operation=self.operation,
                **self.context,
            )
        return False

    def add_context(self, **kwargs: Any) -> None:
        """Add context mid-operation (status codes, batch sizes)."""
        self.context.update(kwargs)
