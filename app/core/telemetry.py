"""OpenTelemetry setup and the domain counters for spam moderation."""

import os
from fastapi import FastAPI
from opentelemetry import trace, metrics
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.instrumentation.psycopg2 import Psycopg2Instrumentor
from loguru import logger

DEFAULT_SERVICE_NAME = "rental-api"

_instrumented = False


def _instrument_once(app: FastAPI) -> None:
    global _instrumented
    if _instrumented:
        return
    FastAPIInstrumentor.instrument_app(app, excluded_urls="/health")
    SQLAlchemyInstrumentor().instrument(enable_commenter=True)  # type: ignore
    Psycopg2Instrumentor().instrument(  # type: ignore
        enable_commenter=True, skip_dep_check=True
    )
    _instrumented = True


def setup_telemetry(app: FastAPI):
    """
    Export traces and metrics over OTLP when `OTEL_EXPORTER_OTLP_ENDPOINT` is set.

    The resource is tagged with `OTEL_SERVICE_NAME` and `ENVIRONMENT`;
    `OTEL_EXPORTER_OTLP_INSECURE=true` disables TLS to the collector. Once
    providers are installed, the spam counters below start exporting. Setup
    failures are logged, never raised, so a missing collector cannot stop the API.
    """
    endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
    if not endpoint:
        logger.warning("OTEL_EXPORTER_OTLP_ENDPOINT not set. Telemetry disabled.")
        return
    try:
        resource = Resource.create(
            {
                "service.name": os.getenv("OTEL_SERVICE_NAME", DEFAULT_SERVICE_NAME),
                "deployment.environment": os.getenv("ENVIRONMENT", "development"),
            }
        )
        insecure = os.getenv("OTEL_EXPORTER_OTLP_INSECURE", "false").lower() == "true"

        tracer_provider = TracerProvider(resource=resource)
        tracer_provider.add_span_processor(
            BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint, insecure=insecure))
        )
        trace.set_tracer_provider(tracer_provider)

        reader = PeriodicExportingMetricReader(
            OTLPMetricExporter(endpoint=endpoint, insecure=insecure)
        )
        metrics.set_meter_provider(
            MeterProvider(resource=resource, metric_readers=[reader])
        )

        _instrument_once(app)
        logger.info(f"Telemetry exporting to {endpoint}")

    except Exception as e:
        logger.error(f"Telemetry setup failed: {e}")


# Domain meters. Resolved through the global provider, so they are no-ops
# until setup_telemetry installs an exporting MeterProvider.
_meter = metrics.get_meter("rental.spam")

spam_detections_counter = _meter.create_counter(
    "spam.detections",
    unit="1",
    description="Spam detection runs, by risk level and verdict",
)

enforcement_actions_counter = _meter.create_counter(
    "spam.enforcement.actions",
    unit="1",
    description="Moderation actions applied to users or content",
)


def record_detection_metric(risk_level: str, is_spam: bool) -> None:
    spam_detections_counter.add(1, {"risk_level": risk_level, "is_spam": is_spam})


def record_enforcement_metric(action: str) -> None:
    enforcement_actions_counter.add(1, {"action": action})
