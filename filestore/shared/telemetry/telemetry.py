"""OpenTelemetry tracing configuration for the storage client.

Spans come from the @traced service operations plus botocore
instrumentation (one span per SDK call).
"""

import logging

from opentelemetry import trace
from opentelemetry.instrumentation.botocore import BotocoreInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

logger = logging.getLogger(__name__)


class TelemetryConfig:
    """Tracer provider setup. Exporters: console or none."""

    def __init__(
        self,
        service_name: str,
        service_version: str,
        enabled: bool = True,
    ) -> None:
        self.service_name = service_name
        self.service_version = service_version
        self.enabled = enabled
        self.tracer_provider: TracerProvider | None = None

    def setup_telemetry(self, exporter_type: str = "console") -> TracerProvider | None:
        """Initialize tracing and set the global tracer provider.

        Args:
            exporter_type: "console" or "none".

        Returns:
            TracerProvider or None if disabled.
        """
        if not self.enabled:
            logger.info("Telemetry disabled")
            return None
        resource = Resource(
            attributes={
                SERVICE_NAME: self.service_name,
                SERVICE_VERSION: self.service_version,
            }
        )
        self.tracer_provider = TracerProvider(resource=resource)
        if exporter_type == "none":
            logger.info("Telemetry enabled but no exporter configured")
        else:
            if exporter_type != "console":
                logger.warning(
                    "Unknown exporter type '%s', using console", exporter_type
                )
            self.tracer_provider.add_span_processor(
                BatchSpanProcessor(ConsoleSpanExporter())
            )
        trace.set_tracer_provider(self.tracer_provider)
        logger.info(
            "OpenTelemetry initialized: service=%s, version=%s, exporter=%s",
            self.service_name,
            self.service_version,
            exporter_type,
        )
        return self.tracer_provider

    def instrument_botocore(self) -> None:
        """Instrument botocore (one span per S3 API call)."""
        if not self.enabled or not self.tracer_provider:
            return
        BotocoreInstrumentor().instrument(tracer_provider=self.tracer_provider)
        logger.info("botocore instrumentation enabled")

    def shutdown(self) -> None:
        """Flush remaining spans and shut the provider down."""
        if self.tracer_provider:
            self.tracer_provider.shutdown()
            logger.info("Telemetry shutdown complete")
