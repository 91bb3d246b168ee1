from core.config import Settings
from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter, SpanExporter

SERVICE_VERSION = "1.0.0"


def build_tracer_provider(settings: Settings, exporter: SpanExporter | None = None) -> TracerProvider:
    """
    Provider tagged with service name, version and environment.
    Spans go to stdout unless another exporter is given.
    """
    resource = Resource.create(
        {
            "service.name": settings.APP_NAME,
            "service.version": SERVICE_VERSION,
            "deployment.environment": getattr(settings, "ENV", "dev"),
        }
    )
    provider = TracerProvider(resource=resource)
    provider.add_span_processor(BatchSpanProcessor(exporter or ConsoleSpanExporter()))
    return provider


def setup_telemetry(settings: Settings) -> TracerProvider:
    # The global provider can only be set once per process
    provider = build_tracer_provider(settings)
    trace.set_tracer_provider(provider)
    return provider


# Proxy tracer: a no-op until setup_telemetry installs the SDK provider
tracer = trace.get_tracer("glb-generator", SERVICE_VERSION)
