"""Observability helpers for the compaction engine.

Configures structured logging and provides the ``debug_wrapper`` tracing
decorator plus helpers to bind the match being compacted to every log line.
"""

import functools
import json
import sys
import time
import traceback
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any, TypeVar, cast

import structlog
from pydantic import BaseModel, ConfigDict, Field
from structlog.contextvars import bind_contextvars, unbind_contextvars

# Configure structured logging
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.dict_tracebacks,
        structlog.dev.ConsoleRenderer() if sys.stderr.isatty() else structlog.processors.JSONRenderer(),  # type: ignore[list-item]
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()

F = TypeVar("F", bound=Callable[..., Any])


def _serialize_value(value: Any, max_length: int = 1000) -> Any:
    """Safely serialize a value for logging, truncating large payloads."""
    try:
        if isinstance(value, BaseModel):
            value = value.model_dump(mode="json", exclude_unset=True)

        json_str = json.dumps(value, default=str)
        if len(json_str) > max_length:
            return json_str[:max_length] + "..."
        return json.loads(json_str)

    except (TypeError, ValueError):
        str_repr = str(value)
        if len(str_repr) > max_length:
            return str_repr[:max_length] + "..."
        return str_repr


class FunctionTrace(BaseModel):
    """Model for function execution trace data."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    function_name: str = Field(description="Fully qualified function name")
    execution_id: str = Field(description="Unique execution ID")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    duration_ms: float | None = Field(default=None, description="Execution duration in milliseconds")

    args: list[Any] = Field(default_factory=list, description="Positional arguments")
    kwargs: dict[str, Any] = Field(default_factory=dict, description="Keyword arguments")
    result: Any | None = Field(default=None, description="Function return value")

    is_success: bool = Field(default=True, description="Whether execution succeeded")
    error_type: str | None = Field(default=None, description="Exception class name if failed")
    error_message: str | None = Field(default=None, description="Exception message if failed")

    metadata: dict[str, Any] = Field(default_factory=dict, description="Additional metadata")


def bind_match_context(match_id: Any, focus_account_id: Any = None) -> None:
    """Attach the match being compacted to every subsequent structlog event."""
    bind_contextvars(match_id=match_id, focus_account_id=focus_account_id)


def clear_match_context() -> None:
    unbind_contextvars("match_id", "focus_account_id")


def debug_wrapper(
    *,
    capture_result: bool = True,
    capture_args: bool = True,
    max_arg_length: int = 1000,
    log_level: str = "INFO",
    add_metadata: dict[str, Any] | None = None,
) -> Callable[[F], F]:
    """Decorator for function tracing: arguments, result, duration and failures.

    Exceptions are logged with their traceback and re-raised unchanged.

    Example:
        >>> @debug_wrapper(capture_result=False)
        ... def compact(match: dict) -> dict:
        ...     return {"match_id": match["match_id"]}
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            execution_id = f"{func.__module__}.{func.__name__}_{int(time.time() * 1000000)}"
            trace = FunctionTrace(
                function_name=f"{func.__module__}.{func.__qualname__}",
                execution_id=execution_id,
                metadata=add_metadata or {},
            )

            if capture_args:
                trace.args = [_serialize_value(arg, max_arg_length) for arg in args]
                trace.kwargs = {k: _serialize_value(v, max_arg_length) for k, v in kwargs.items()}

            bind_contextvars(execution_id=execution_id)
            _emit = getattr(logger, log_level.lower())
            _emit(
                f"Executing function: {trace.function_name}",
                execution_id=execution_id,
                args=trace.args if capture_args else None,
                kwargs=trace.kwargs if capture_args else None,
                **trace.metadata,
            )

            start_time = time.perf_counter()
            try:
                result = func(*args, **kwargs)

                trace.duration_ms = (time.perf_counter() - start_time) * 1000
                if capture_result:
                    trace.result = _serialize_value(result, max_arg_length)

                _emit(
                    f"Successfully executed: {trace.function_name}",
                    execution_id=execution_id,
                    duration_ms=trace.duration_ms,
                    result=trace.result if capture_result else None,
                )
                return result

            except Exception as e:
                trace.duration_ms = (time.perf_counter() - start_time) * 1000
                trace.is_success = False
                trace.error_type = type(e).__name__
                trace.error_message = str(e)

                logger.error(
                    f"Error in function: {trace.function_name}",
                    execution_id=execution_id,
                    duration_ms=trace.duration_ms,
                    error_type=trace.error_type,
                    error_message=trace.error_message,
                    traceback=traceback.format_exc(),
                )
                raise

            finally:
                unbind_contextvars("execution_id")

        return cast(F, wrapper)

    return decorator


def trace_engine(func: F) -> F:
    """Decorator for compaction engine entry points."""
    return debug_wrapper(
        capture_result=False,
        capture_args=False,
        log_level="INFO",
        add_metadata={"layer": "engine"},
    )(func)
