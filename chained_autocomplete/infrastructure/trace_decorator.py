"""
Trace decorator for async handlers.

Wraps a coroutine function with an OpenTelemetry span and captures:
- Span name (e.g. "places.http.get", "mcp.tool.search_places")
- Handler type (request / tool)
- Function arguments as span attributes
- Duration and success/failure status

Usage:
    @traced(span_name="mcp.tool.search_places", handler_type="tool")
    async def search_places(text: str) -> AutocompleteStateResponse:
        ...
"""

from __future__ import annotations

import functools
import inspect
import time
from collections.abc import Mapping
from typing import Any, Callable

from loguru import logger

from chained_autocomplete.infrastructure.observability import get_observability_manager


def traced(
    span_name: str,
    handler_type: str = "tool",
) -> Callable:
    """
    Decorator that wraps an async handler with an OpenTelemetry span.

    Args:
        span_name: The span name (e.g. "places.http.get").
        handler_type: Either "request" or "tool".
    """

    def decorator(func: Callable) -> Callable:
        sig = inspect.signature(func)

        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            observability = get_observability_manager()

            bound = sig.bind(*args, **kwargs)
            bound.apply_defaults()

            span_attributes: dict[str, Any] = {
                "handler.type": handler_type,
                "handler.name": func.__name__,
            }

            for param_name, param_value in bound.arguments.items():
                if param_name == "self":
                    continue
                # never export credentials
                if param_name == "params" and isinstance(param_value, Mapping):
                    param_value = sorted(param_value)
                span_attributes[f"{handler_type}.param.{param_name}"] = str(param_value)

            start_time = time.monotonic()

            with observability.create_span(
                name=span_name,
                attributes=span_attributes,
            ):
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    duration_ms = (time.monotonic() - start_time) * 1000

                    observability.record_workflow_step(
                        step_name=func.__name__,
                        step_type=handler_type,
                        duration_ms=round(duration_ms, 2),
                        success=False,
                        metadata={"error": str(e)},
                    )

                    logger.debug(
                        f"[trace] {span_name} failed after {duration_ms:.1f}ms: {e}"
                    )

                    raise

                duration_ms = (time.monotonic() - start_time) * 1000

                observability.record_workflow_step(
                    step_name=func.__name__,
                    step_type=handler_type,
                    duration_ms=round(duration_ms, 2),
                    success=True,
                )

                logger.debug(f"[trace] {span_name} completed in {duration_ms:.1f}ms")

                return result

        return wrapper

    return decorator
