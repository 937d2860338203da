"""Custom Prometheus metrics for the Inline Completion Engine.

These metrics are exposed at /metrics endpoint and should be scraped by Prometheus.
Useful alert rules:
- completion_requests_total{outcome="timeout"} (backend too slow for inline use)
- completion_requests_total{outcome="unavailable"} (model missing or not downloaded)
- admission_queue_depth (prefetch bursts starving foreground requests)
"""

from prometheus_client import Counter, Gauge, Histogram

# === Request Metrics ===

completion_requests_total = Counter(
    "completion_requests_total",
    "Completion requests by kind and outcome",
    ["kind", "outcome"],
)
"""
Completion requests counter.

Labels:
- kind: foreground, prefetch
- outcome: success, cache_hit, superseded, aborted, timeout, unavailable, error
"""

# === Cache Metrics ===

completion_cache_events_total = Counter(
    "completion_cache_events_total",
    "Completion cache events",
    ["event"],
)
"""
Cache events counter.

Labels:
- event: hit, miss, expired, evicted

A low hit/miss ratio with many evictions means the 1000-entry cap is too small
for the typing pattern.
"""

# === Backend Metrics ===

backend_latency_seconds = Histogram(
    "backend_latency_seconds",
    "Backend prompt latency in seconds",
    ["provider", "success"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0],
)
"""
Backend latency histogram.

Labels:
- provider: local, openai, stub
- success: true, false

Buckets sized for inline suggestions, where anything above ~1s feels laggy.
"""

admission_queue_depth = Gauge(
    "admission_queue_depth",
    "Backend calls waiting for an admission slot",
)

# === Session Metrics ===

backend_sessions_active = Gauge(
    "backend_sessions_active",
    "Live backend sessions held by the session manager",
)

session_events_total = Counter(
    "session_events_total",
    "Backend session lifecycle events",
    ["event"],
)
"""
Session lifecycle counter.

Labels:
- event: created, reused, expired, clone_failed, destroyed
"""

# === Parser Metrics ===

response_parse_fallbacks_total = Counter(
    "response_parse_fallbacks_total",
    "Backend outputs that were not structured suggestions",
    ["error_type"],
)
"""
Parse fallback counter (raw output used as a single candidate).

Labels:
- error_type: empty_content, json_decode_error, not_json_object, missing_suggestions
"""
