"""Shared telemetry: logging setup, OpenTelemetry config, and tracing helpers."""

from filestore.shared.telemetry.logging import get_logger, setup_logging
from filestore.shared.telemetry.telemetry import TelemetryConfig
from filestore.shared.telemetry.tracing import (
    add_span_attributes,
    add_span_event,
    traced,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "TelemetryConfig",
    "traced",
    "add_span_attributes",
    "add_span_event",
]
