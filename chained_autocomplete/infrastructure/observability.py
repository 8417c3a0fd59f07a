"""
Observability configuration for the autocomplete engine.

Provides OpenTelemetry-based tracing for:
- Places API requests issued by the RequestExecutor
- MCP tool invocations on the autocomplete server
- Workflow step events (duration, success) on the current span

Tracing is off unless AGENT_OBSERVABILITY_ENABLED is set. Exporters are
configured outside the process, e.g.:
    opentelemetry-instrument python -m chained_autocomplete.main
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Optional

from loguru import logger
from opentelemetry import trace
from opentelemetry.trace import SpanKind, Status, StatusCode


class ObservabilityManager:
    """
    Manages OpenTelemetry spans for the autocomplete engine.

    When disabled every helper is a no-op, so call sites never branch on it.
    """

    def __init__(
        self,
        service_name: str = "chained-autocomplete",
        enabled: bool = False,
    ) -> None:
        self.service_name = service_name
        self.enabled = enabled
        self._tracer = None

        if self.enabled:
            self._tracer = trace.get_tracer(
                instrumenting_module_name=service_name,
                tracer_provider=trace.get_tracer_provider(),
            )
            logger.info(f"Observability initialized for service: {service_name}")
        else:
            logger.debug("Observability disabled")

    # ------------------------------------------------------------------
    # Span creation
    # ------------------------------------------------------------------

    @contextmanager
    def create_span(
        self,
        name: str,
        kind=None,
        attributes: Optional[dict] = None,
    ):
        """
        Create a custom span for detailed tracing.

        Args:
            name: Span name (e.g. "places.http.get").
            kind: SpanKind (defaults to INTERNAL).
            attributes: Custom attributes to attach.
        """
        if not self.enabled or self._tracer is None:
            yield None
            return

        with self._tracer.start_as_current_span(
            name=name,
            kind=kind or SpanKind.INTERNAL,
            attributes=attributes or {},
        ) as span:
            try:
                yield span
            except Exception as e:
                span.set_status(Status(StatusCode.ERROR, str(e)))
                span.record_exception(e)
                raise

    def add_span_event(
        self,
        name: str,
        attributes: Optional[dict] = None,
    ) -> None:
        """Add an event to the current span."""
        if not self.enabled:
            return

        current_span = trace.get_current_span()
        if current_span:
            current_span.add_event(name, attributes=attributes or {})

    def record_workflow_step(
        self,
        step_name: str,
        step_type: str,
        duration_ms: Optional[float] = None,
        success: bool = True,
        metadata: Optional[dict] = None,
    ) -> None:
        """Record a workflow step as a span event with standard attributes."""
        attributes: dict = {
            "workflow.step.name": step_name,
            "workflow.step.type": step_type,
            "workflow.step.success": success,
        }

        if duration_ms is not None:
            attributes["workflow.step.duration_ms"] = duration_ms

        if metadata:
            for key, value in metadata.items():
                attributes[f"workflow.step.{key}"] = str(value)

        self.add_span_event(f"workflow.{step_name}", attributes)


# ------------------------------------------------------------------
# Singleton
# ------------------------------------------------------------------

_observability_manager: ObservabilityManager | None = None


def get_observability_manager() -> ObservabilityManager:
    """Return the global ObservabilityManager singleton (lazy-init)."""
    global _observability_manager

    if _observability_manager is None:
        from chained_autocomplete.config import settings

        _observability_manager = ObservabilityManager(
            service_name=settings.OTEL_SERVICE_NAME,
            enabled=settings.AGENT_OBSERVABILITY_ENABLED,
        )

    return _observability_manager


def initialize_observability(
    service_name: str = "chained-autocomplete",
    enabled: bool = False,
) -> ObservabilityManager:
    """Initialize the global observability manager at startup."""
    global _observability_manager

    _observability_manager = ObservabilityManager(
        service_name=service_name,
        enabled=enabled,
    )

    return _observability_manager
