"""
Centralized logging and error handling utilities for the chat client.

This module provides decorators and helper functions to standardize logging
patterns across the codebase, reducing boilerplate and ensuring consistent
error reporting.

Features:
- Structured logging with contextual information
- Automatic error classification for log records
- Performance timing for operations
"""

from __future__ import annotations

import functools
import logging
import time
from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any, ParamSpec, TypeVar

import httpx
import structlog
from pydantic import ValidationError

from chat_gpt_lib.llm.exceptions import (
    APIError,
    ConfigurationError,
    StreamingError,
)

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer(colors=True),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

# Type variables for generic decorators
P = ParamSpec("P")
T = TypeVar("T")
AsyncCallable = Callable[P, Awaitable[T]]

logger = structlog.get_logger(__name__)


def configure_logging(level: str | int = "INFO") -> None:
    """Set the stdlib root level that filters structlog output."""
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown logging level '{level}'")
        level = resolved

    logging.basicConfig(
        level=level, format="%(message)s"
    )
    logging.getLogger().setLevel(level)


def classify_error(error: Exception) -> str:
    """
    Classify an error into a category used in log records.

    Args:
        error: The exception to classify

    Returns:
        Error category name
    """
    if isinstance(error, APIError):
        return "api_error"
    if isinstance(error, StreamingError):
        return "streaming_error"
    if isinstance(error, ConfigurationError):
        return "configuration_error"
    if isinstance(error, ValidationError):
        return "validation_error"
    if isinstance(error, httpx.TimeoutException | TimeoutError):
        return "timeout_error"
    if isinstance(error, httpx.TransportError | ConnectionError | OSError):
        return "connection_error"
    if isinstance(error, ValueError | TypeError):
        return "parameter_error"
    return "unknown_error"


def _failure_fields(error: Exception, start_time: float | None) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "error_type": type(error).__name__,
        "error_category": classify_error(error),
        "error_message": str(error),
    }
    if start_time is not None:
        fields["duration_ms"] = round((time.perf_counter() - start_time) * 1000, 2)
    return fields


def log_operation(
    operation: str,
    *,
    log_args: bool = False,
    log_result: bool = False,
    log_timing: bool = True,
    context: dict[str, Any] | None = None,
) -> Callable[[AsyncCallable[P, T]], AsyncCallable[P, T]]:
    """
    Decorator for logging async operations with structured context.

    Args:
        operation: Description of the operation being performed
        log_args: Whether to log function arguments
        log_result: Whether to log function result
        log_timing: Whether to log execution timing
        context: Additional context to include in logs

    Returns:
        Decorated function with logging
    """
    def decorator(func: AsyncCallable[P, T]) -> AsyncCallable[P, T]:
        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            operation_logger = logger.bind(
                operation=operation,
                function=func.__name__,
                **(context or {}),
            )

            log_data = {}
            if log_args:
                log_data.update({
                    "args": args[1:] if args else [],  # Skip 'self' if present
                    "kwargs": kwargs,
                })

            operation_logger.info("Operation started", **log_data)

            start_time = time.perf_counter() if log_timing else None

            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                operation_logger.error(
                    "Operation failed", **_failure_fields(e, start_time)
                )
                raise

            end_log_data: dict[str, Any] = {}
            if start_time is not None:
                duration = round((time.perf_counter() - start_time) * 1000, 2)
                end_log_data["duration_ms"] = duration
            if log_result:
                end_log_data["result"] = result

            operation_logger.info("Operation completed successfully", **end_log_data)
            return result

        return wrapper
    return decorator


@asynccontextmanager
async def operation_context(
    operation: str,
    *,
    context: dict[str, Any] | None = None,
    log_timing: bool = True,
):
    """
    Async context manager for operation logging.

    Args:
        operation: Description of the operation
        context: Additional context for logging
        log_timing: Whether to log operation timing

    Yields:
        Bound logger for the operation
    """
    operation_logger = logger.bind(
        operation=operation,
        **(context or {}),
    )

    operation_logger.info("Operation started")
    start_time = time.perf_counter() if log_timing else None

    try:
        yield operation_logger
    except Exception as e:
        operation_logger.error("Operation failed", **_failure_fields(e, start_time))
        raise

    log_data: dict[str, Any] = {}
    if start_time is not None:
        duration = round((time.perf_counter() - start_time) * 1000, 2)
        log_data["duration_ms"] = duration

    operation_logger.info("Operation completed successfully", **log_data)
