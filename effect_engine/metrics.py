"""
Prometheus metrics for the effect engine.

Exposes engine activity via an HTTP /metrics endpoint for Prometheus scraping.

Environment Variables:
    EFFECT_ENGINE_METRICS_ENABLED: Enable metrics server (true/false) - default: false
    EFFECT_ENGINE_METRICS_PORT: HTTP port for /metrics endpoint - default: 8080

Usage:
    from effect_engine.metrics import start_metrics_server, track_event

    start_metrics_server(enabled=True, port=8080)

    # Track events
    track_event("effect-started")
"""

import logging
import threading
from typing import Optional

from prometheus_client import Counter, Gauge, Histogram, start_http_server

logger = logging.getLogger(__name__)

# Metrics registry (module-level, created once by init_metrics)
EVENTS_TOTAL: Optional[Counter] = None
RUNNING_EFFECTS: Optional[Gauge] = None
BATCH_SIZE: Optional[Histogram] = None

_metrics_initialized = False
_metrics_lock = threading.Lock()


def init_metrics() -> None:
    """
    Initialize Prometheus metrics (call once at startup).

    Safe to call repeatedly; the default registry rejects duplicate
    collectors, so creation happens only on the first call.
    """
    global EVENTS_TOTAL, RUNNING_EFFECTS, BATCH_SIZE
    global _metrics_initialized

    with _metrics_lock:
        if _metrics_initialized:
            return

        # Timeline event counter (labels: event_type)
        EVENTS_TOTAL = Counter(
            "effect_engine_events_total",
            "Total number of timeline events emitted",
            labelnames=["event_type"],
        )

        # Running effects per engine instance
        RUNNING_EFFECTS = Gauge(
            "effect_engine_running_effects",
            "Number of effects currently running",
            labelnames=["engine"],
        )

        # Signals folded per batch
        BATCH_SIZE = Histogram(
            "effect_engine_batch_size",
            "Number of signals folded per batch",
            buckets=(1, 2, 5, 10, 25, 50, 100, 250),
        )

        _metrics_initialized = True
        logger.info("Prometheus metrics initialized")


def metrics_initialized() -> bool:
    return _metrics_initialized


def start_metrics_server(enabled: bool, port: int) -> None:
    """
    Start Prometheus metrics HTTP server in background thread.

    Args:
        enabled: Whether to start metrics server
        port: HTTP port for /metrics endpoint

    Side Effects:
        - Starts HTTP server in daemon thread (does not block)
        - Initializes metrics registry if not already initialized
    """
    if not enabled:
        logger.info("Metrics server disabled (EFFECT_ENGINE_METRICS_ENABLED=false)")
        return

    init_metrics()

    try:
        start_http_server(port, addr="0.0.0.0")
        logger.info(f"Metrics server started on http://0.0.0.0:{port}/metrics")
    except OSError as e:
        logger.error(f"Failed to start metrics server: {e}")


def track_event(event_type: str) -> None:
    """
    Count one timeline event.

    Args:
        event_type: Event discriminator (e.g., "effect-started")
    """
    if EVENTS_TOTAL is not None:
        EVENTS_TOTAL.labels(event_type=event_type).inc()


def set_running_effects(engine: str, count: int) -> None:
    """Record the number of running effects for an engine instance."""
    if RUNNING_EFFECTS is not None:
        RUNNING_EFFECTS.labels(engine=engine).set(count)


def observe_batch(size: int) -> None:
    """Record the number of signals in a processed batch."""
    if BATCH_SIZE is not None:
        BATCH_SIZE.observe(size)
