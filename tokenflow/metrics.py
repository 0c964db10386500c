"""
Prometheus metrics for the replay engine.

Recording helpers are no-ops until init_metrics() has run, so library users
and tests pay nothing unless they opt in.

Usage:
    from tokenflow.metrics import start_metrics_server, track_fire

    start_metrics_server(enabled=True, port=9108)
    track_fire("forward")
"""

import logging
import threading
from contextlib import contextmanager
from typing import Generator, Optional

from prometheus_client import Counter, Histogram, start_http_server

logger = logging.getLogger(__name__)

TRANSITIONS_FIRED: Optional[Counter] = None
REPLAY_ERRORS: Optional[Counter] = None
TRACE_EVENTS_PARSED: Optional[Counter] = None
TRACE_PARSE_DURATION: Optional[Histogram] = None

_metrics_initialized = False
_metrics_lock = threading.Lock()


def init_metrics() -> None:
    """
    Initialize Prometheus metrics (safe to call more than once).
    """
    global TRANSITIONS_FIRED, REPLAY_ERRORS, TRACE_EVENTS_PARSED, TRACE_PARSE_DURATION
    global _metrics_initialized

    with _metrics_lock:
        if _metrics_initialized:
            return

        # Firings (labels: direction = forward | backward)
        TRANSITIONS_FIRED = Counter(
            "tokenflow_transitions_fired_total",
            "Total number of transition firings applied by the replay engine",
            labelnames=["direction"],
        )

        # Firing errors (labels: kind = exception class name)
        REPLAY_ERRORS = Counter(
            "tokenflow_replay_errors_total",
            "Total number of replay steps rejected with an error",
            labelnames=["kind"],
        )

        TRACE_EVENTS_PARSED = Counter(
            "tokenflow_trace_events_parsed_total",
            "Total number of trace events parsed from logs",
            labelnames=["format"],
        )

        TRACE_PARSE_DURATION = Histogram(
            "tokenflow_trace_parse_duration_seconds",
            "Duration of trace log parsing in seconds",
            buckets=(0.001, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0),
        )

        _metrics_initialized = True
        logger.info("Prometheus metrics initialized")


def start_metrics_server(enabled: bool, port: int) -> None:
    """
    Start the /metrics HTTP endpoint in a daemon thread.

    Args:
        enabled: Whether to start the server at all
        port: HTTP port to listen on
    """
    if not enabled:
        return

    init_metrics()
    start_http_server(port)
    logger.info("Metrics server started on port %d", port)


def track_fire(direction: str) -> None:
    if TRANSITIONS_FIRED is not None:
        TRANSITIONS_FIRED.labels(direction=direction).inc()


def track_error(kind: str) -> None:
    if REPLAY_ERRORS is not None:
        REPLAY_ERRORS.labels(kind=kind).inc()


def track_parsed(fmt: str, count: int) -> None:
    if TRACE_EVENTS_PARSED is not None:
        TRACE_EVENTS_PARSED.labels(format=fmt).inc(count)


@contextmanager
def track_parse_duration() -> Generator[None, None, None]:
    """
    Context manager timing a trace parse.

    Usage:
        with track_parse_duration():
            events = parse_trace(content)
    """
    if TRACE_PARSE_DURATION is None:
        yield
        return

    with TRACE_PARSE_DURATION.time():
        yield
