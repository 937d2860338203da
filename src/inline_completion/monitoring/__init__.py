"""Monitoring and metrics instrumentation for the Inline Completion Engine.

Exports custom Prometheus metrics for operational monitoring and alerting.
"""

from inline_completion.monitoring.metrics import (
    admission_queue_depth,
    backend_latency_seconds,
    backend_sessions_active,
    completion_cache_events_total,
    completion_requests_total,
    response_parse_fallbacks_total,
    session_events_total,
)

__all__ = [
    "completion_requests_total",
    "completion_cache_events_total",
    "backend_latency_seconds",
    "admission_queue_depth",
    "backend_sessions_active",
    "session_events_total",
    "response_parse_fallbacks_total",
]
