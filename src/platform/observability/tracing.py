"""
OpenTelemetry tracing

- FastAPI and SQLAlchemy are auto-instrumented
- payment gateway calls open manual spans (``payment.create_preference``, ``payment.lookup``)
- spans go to the OTLP collector when OTEL_EXPORTER_OTLP_ENDPOINT is set, and to stdout
  when OTEL_CONSOLE_EXPORT is true; with neither, tracing stays off and the global no-op
  tracer provider is kept
"""

from typing import Any

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import (
    DEPLOYMENT_ENVIRONMENT,
    SERVICE_NAME,
    SERVICE_VERSION,
    Resource,
)
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased

from src.platform.config.core_setting import settings


class TracingConfig:
    """
    Usage:
        tracing = TracingConfig(service_name=settings.SERVICE_NAME)
        if tracing.enabled:
            tracing.setup()
            tracing.instrument_sqlalchemy(engine=database.engine)
    """

    def __init__(
        self,
        *,
        service_name: str,
        otlp_endpoint: str | None = None,
        enable_console: bool = False,
        sample_ratio: float | None = None,
    ) -> None:
        self.service_name = service_name
        self.otlp_endpoint = otlp_endpoint or settings.OTEL_EXPORTER_OTLP_ENDPOINT
        self.enable_console = enable_console or settings.OTEL_CONSOLE_EXPORT
        self.sample_ratio = settings.OTEL_SAMPLE_RATIO if sample_ratio is None else sample_ratio
        self._provider: TracerProvider | None = None

    @property
    def enabled(self) -> bool:
        return bool(self.otlp_endpoint) or self.enable_console

    def build_resource(self) -> Resource:
        return Resource(
            attributes={
                SERVICE_NAME: self.service_name,
                SERVICE_VERSION: settings.VERSION,
                DEPLOYMENT_ENVIRONMENT: settings.DEPLOY_ENV,
            }
        )

    def setup(self) -> None:
        # Child spans follow the caller's decision so a webhook trace is never cut in half
        self._provider = TracerProvider(
            resource=self.build_resource(),
            sampler=ParentBased(TraceIdRatioBased(self.sample_ratio)),
        )
        if self.otlp_endpoint:
            self._provider.add_span_processor(
                BatchSpanProcessor(OTLPSpanExporter(endpoint=self.otlp_endpoint))
            )
        if self.enable_console:
            self._provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

        trace.set_tracer_provider(self._provider)

    def instrument_fastapi(self, *, app: Any, excluded_urls: str = 'health,metrics') -> None:
        FastAPIInstrumentor.instrument_app(app, excluded_urls=excluded_urls)

    def instrument_sqlalchemy(self, *, engine: Any) -> None:
        SQLAlchemyInstrumentor().instrument(engine=getattr(engine, 'sync_engine', engine))

    def shutdown(self) -> None:
        if self._provider:
            self._provider.shutdown()
