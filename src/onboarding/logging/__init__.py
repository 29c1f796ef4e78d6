"""
Structured logging module.

Provides JSON and console logging with correlation ids and context propagation.
"""

from onboarding.logging.context import (
    clear_log_context,
    get_log_context,
    set_log_context,
)
from onboarding.logging.context_managers import LogContext, OperationContext
from onboarding.logging.formatters import ConsoleFormatter, JSONFormatter
from onboarding.logging.setup import get_logger, setup_logging
from onboarding.logging.utilities import log_exception, log_with_context

__all__ = [
    # Setup
    "setup_logging",
    "get_logger",
    # Formatters
    "JSONFormatter",
    "ConsoleFormatter",
    # Context
    "set_log_context",
    "get_log_context",
    "clear_log_context",
    # Context Managers
    "LogContext",
    "OperationContext",
    # Utilities
    "log_with_context",
    "log_exception",
]
