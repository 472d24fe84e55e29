"""OpenTelemetry tracing for the users service.

``TracingManager`` owns the process tracer provider and its lifecycle:

* ``setup()`` builds the provider (service-name resource, one batch span
  processor per exporter) and instruments outbound ``httpx`` calls.
* ``shutdown()`` removes the instrumentation and flushes pending batches.

Inbound requests are traced by ``TracingMiddleware``, which skips static
assets and otherwise delegates to OpenTelemetry's ASGI middleware.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Sequence

import structlog
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.asgi import OpenTelemetryMiddleware
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import ReadableSpan, TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SpanExporter,
    SpanExportResult,
)
from opentelemetry.trace import Span

from usersvc.config import Settings
from usersvc.observability.enricher import enrich, inbound_from_scope, outbound_from_httpx
from usersvc.observability.span_filter import should_ignore


logger = structlog.get_logger("tracing")


class ConcurrencyLimitedExporter(SpanExporter):
    """Caps the number of span batches being exported at the same time.

    Callers beyond the limit wait for a slot instead of failing.
    """

    def __init__(self, exporter: SpanExporter, limit: int) -> None:
        if limit < 1:
            raise ValueError("limit must be at least 1")
        self._exporter = exporter
        self._slots = threading.BoundedSemaphore(limit)
        self.limit = limit

    def export(self, spans: Sequence[ReadableSpan]) -> SpanExportResult:
        with self._slots:
            return self._exporter.export(spans)

    def shutdown(self) -> None:
        self._exporter.shutdown()

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        return self._exporter.force_flush(timeout_millis)


def server_request_hook(span: Span, scope: dict[str, Any]) -> None:
    enrich(span, inbound_from_scope(scope))


def client_request_hook(span: Span, request_info: Any) -> None:
    enrich(span, outbound_from_httpx(request_info))


async def async_client_request_hook(span: Span, request_info: Any) -> None:
    enrich(span, outbound_from_httpx(request_info))


class TracingManager:
    """Owns the tracer provider; ``initialized`` is True between setup and shutdown."""

    def __init__(self, settings: Settings, exporters: Sequence[SpanExporter] | None = None) -> None:
        self.settings = settings
        self._exporters = list(exporters) if exporters is not None else None
        self._provider: TracerProvider | None = None
        self._httpx_instrumentor: HTTPXClientInstrumentor | None = None
        self.registered_globally = False

    @property
    def initialized(self) -> bool:
        return self._provider is not None

    @property
    def provider(self) -> TracerProvider | None:
        return self._provider

    def setup(self, set_global: bool = True) -> TracerProvider:
        """Build the provider and instrument httpx; a no-op while initialized.

        OpenTelemetry accepts a global tracer provider only once per process, so
        ``set_global`` takes effect on the first registration only. Later managers
        keep working through their own provider; ``registered_globally`` says which.
        """
        if self._provider is not None:
            return self._provider

        resource = Resource.create({SERVICE_NAME: self.settings.otel_service_name})
        provider = TracerProvider(resource=resource)

        exporters = self._exporters if self._exporters is not None else self._default_exporters()
        for exporter in exporters:
            provider.add_span_processor(BatchSpanProcessor(exporter))

        if set_global:
            trace.set_tracer_provider(provider)
            self.registered_globally = trace.get_tracer_provider() is provider
            if not self.registered_globally:
                logger.warning(
                    "global_tracer_provider_not_replaced",
                    service_name=self.settings.otel_service_name,
                )

        instrumentor = HTTPXClientInstrumentor()
        instrumentor.instrument(
            tracer_provider=provider,
            request_hook=client_request_hook,
            async_request_hook=async_client_request_hook,
        )

        self._httpx_instrumentor = instrumentor
        self._provider = provider

        logger.info(
            "tracing_initialized",
            service_name=self.settings.otel_service_name,
            exporters=[type(exporter).__name__ for exporter in exporters],
        )
        return provider

    def shutdown(self) -> None:
        if self._provider is None:
            return

        if self._httpx_instrumentor is not None:
            self._httpx_instrumentor.uninstrument()
            self._httpx_instrumentor = None

        # Flushes whatever the batch processors still hold.
        self._provider.shutdown()
        self._provider = None
        self.registered_globally = False
        logger.info("tracing_shutdown")

    def _default_exporters(self) -> list[SpanExporter]:
        otlp_exporter = OTLPSpanExporter(
            endpoint=self.settings.otel_exporter_endpoint,
            headers=self.settings.otel_headers,
        )
        exporters: list[SpanExporter] = [
            ConcurrencyLimitedExporter(otlp_exporter, limit=self.settings.otel_concurrency_limit)
        ]
        if self.settings.otel_console_export:
            exporters.append(ConsoleSpanExporter())
        return exporters


class TracingMiddleware:
    """Traces inbound HTTP requests, except for static assets."""

    def __init__(self, app: Callable[..., Any], tracing: TracingManager) -> None:
        self.app = app
        self.tracing = tracing
        self._traced_app: OpenTelemetryMiddleware | None = None
        self._traced_provider: TracerProvider | None = None

    async def __call__(self, scope: dict[str, Any], receive: Callable[..., Any], send: Callable[..., Any]) -> None:
        provider = self.tracing.provider
        if scope.get("type") != "http" or provider is None or should_ignore(scope.get("path") or ""):
            await self.app(scope, receive, send)
            return

        await self._otel_app(provider)(scope, receive, send)

    def _otel_app(self, provider: TracerProvider) -> OpenTelemetryMiddleware:
        # Rebuilt when the manager is set up again with a new provider.
        if self._traced_app is None or self._traced_provider is not provider:
            self._traced_app = OpenTelemetryMiddleware(
                self.app,
                server_request_hook=server_request_hook,
                tracer_provider=provider,
                exclude_spans=["receive", "send"],
            )
            self._traced_provider = provider
        return self._traced_app
