"""
Telemetry module for OpenTelemetry + Application Insights.

Traces the chat pipeline: ``chat.handle`` wraps each request, with
``search.web`` and ``provider.generate`` spans for the outbound calls. The
tracer resource identifies the deployment and the configured LLM provider.
"""

import logging

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from chatbot import __version__
from chatbot.core.config import Settings

logger = logging.getLogger(__name__)

SERVICE_NAME = "sikkim-monastery-chatbot"

_tracer: trace.Tracer | None = None


def build_resource(settings: Settings) -> Resource:
    """Resource attributes attached to every span."""
    return Resource.create(
        {
            "service.name": SERVICE_NAME,
            "service.version": __version__,
            "deployment.environment": settings.environment,
            "chatbot.provider": settings.provider_name,
            "chatbot.web_search": settings.use_web_search,
        }
    )


def setup_telemetry(settings: Settings) -> None:
    """
    Initialize OpenTelemetry, exporting to Application Insights when
    ``APPLICATIONINSIGHTS_CONNECTION_STRING`` is set. Without it, spans are
    recorded but not exported (local dev).
    """
    global _tracer

    provider = TracerProvider(resource=build_resource(settings))
    connection_string = settings.applicationinsights_connection_string

    if connection_string:
        try:
            from azure.monitor.opentelemetry.exporter import (
                AzureMonitorTraceExporter,
            )

            exporter = AzureMonitorTraceExporter(connection_string=connection_string)
            provider.add_span_processor(BatchSpanProcessor(exporter))
            logger.info("Application Insights telemetry enabled.")
        except ImportError:
            logger.warning(
                "azure-monitor-opentelemetry-exporter not installed. "
                "Install the 'azure' extra to export traces."
            )
    else:
        logger.info("No connection string provided. Telemetry export disabled.")

    trace.set_tracer_provider(provider)
    _tracer = trace.get_tracer(SERVICE_NAME, __version__)


def get_tracer() -> trace.Tracer:
    """Return the application tracer, falling back to the global provider."""
    global _tracer
    if _tracer is None:
        _tracer = trace.get_tracer(SERVICE_NAME, __version__)
    return _tracer
