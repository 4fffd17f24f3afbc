"""Prometheus metrics for audit runs and model calls."""

from prometheus_client import Counter, Histogram, Info

APP_INFO = Info("salon_audit", "Salon audit pipeline info")
APP_INFO.info({"version": "1.0.0", "name": "salon_audit"})

AUDIT_RUNS = Counter(
    "audit_runs_total",
    "Total audit pipeline runs",
    ["status"],
)

VALIDATION_FAILURES = Counter(
    "audit_validation_failures_total",
    "Listings rejected before analysis",
    ["code"],
)

AI_CALLS = Counter(
    "audit_ai_calls_total",
    "Generative model calls issued by the report orchestrator",
    ["step", "status"],
)

AI_CALL_DURATION = Histogram(
    "audit_ai_call_duration_seconds",
    "Duration of a single generative model call",
    ["step"],
    buckets=[0.5, 1, 2.5, 5, 10, 20, 30, 60, 120],
)
