# tactjam/lib/monitoring.py
from fastapi import FastAPI
from prometheus_client.registry import CollectorRegistry as Registry
from prometheus_client import Counter
from prometheus_fastapi_instrumentator import Instrumentator
from tactjam.core.logging import log

# Create a separate registry
registry = Registry()

references_created = Counter(
    'tactjam_references_created_total',
    'Tags, body tags and motor position sets created by the resolver',
    ['kind'],
    registry=registry
)

create_compensations = Counter(
    'tactjam_saga_compensations_total',
    'Writes rolled back after a failed multi-step operation',
    ['saga'],
    registry=registry
)


def record_reference_created(kind: str):
    references_created.labels(kind=kind).inc()


def record_compensation(saga: str):
    create_compensations.labels(saga=saga).inc()


def register_monitoring(app: FastAPI):
    """
    Registers Prometheus monitoring on the FastAPI app and exposes /metrics.
    """
    instrumentator = Instrumentator(
        excluded_handlers=["/metrics"],  # Don't monitor the metrics endpoint itself
        registry=registry  # Use our custom registry
    ).instrument(app)

    instrumentator.expose(app, include_in_schema=False, should_gzip=True)

    log("MONITORING", "Prometheus instrumentation registered at /metrics.")
