"""Prometheus metrics helpers for the marketplace core."""

from __future__ import annotations

import threading

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

_LOCK = threading.Lock()
_REGISTRY: CollectorRegistry | None = None

# Prometheus collectors (initialised lazily so tests can reset the registry)
_FETCH_COUNTER: Counter
_FETCH_LATENCY_SECONDS: Histogram
_SUBMISSION_COUNTER: Counter
_VALIDATION_FAILURE_COUNTER: Counter


def _initialise_registry() -> None:
    global _REGISTRY
    global _FETCH_COUNTER, _FETCH_LATENCY_SECONDS
    global _SUBMISSION_COUNTER, _VALIDATION_FAILURE_COUNTER

    registry = CollectorRegistry()

    _FETCH_COUNTER = Counter(
        "khadamat_api_fetch_total",
        "Number of marketplace API calls grouped by resource, outcome and cache use.",
        ["resource", "outcome", "cache"],
        registry=registry,
    )
    _FETCH_LATENCY_SECONDS = Histogram(
        "khadamat_api_fetch_seconds",
        "Latency of marketplace API calls (cache hits are recorded as zero).",
        ["resource", "cache"],
        registry=registry,
    )
    _SUBMISSION_COUNTER = Counter(
        "khadamat_registration_submissions_total",
        "Registration submissions grouped by outcome.",
        ["outcome"],
        registry=registry,
    )
    _VALIDATION_FAILURE_COUNTER = Counter(
        "khadamat_registration_validation_failures_total",
        "Registration validation failures grouped by wizard step.",
        ["step"],
        registry=registry,
    )

    _REGISTRY = registry


def _ensure_registry() -> None:
    if _REGISTRY is None:
        with _LOCK:
            if _REGISTRY is None:
                _initialise_registry()


def record_fetch(resource: str, *, cache_hit: bool, outcome: str, duration_seconds: float) -> None:
    """Record an API call (live or cache)."""

    _ensure_registry()
    cache_label = "hit" if cache_hit else "miss"
    _FETCH_COUNTER.labels(resource=resource, outcome=outcome, cache=cache_label).inc()
    _FETCH_LATENCY_SECONDS.labels(resource=resource, cache=cache_label).observe(duration_seconds)


def record_submission(outcome: str) -> None:
    """Record the outcome of a registration submission."""

    _ensure_registry()
    _SUBMISSION_COUNTER.labels(outcome=outcome).inc()


def record_validation_failure(step: str) -> None:
    _ensure_registry()
    _VALIDATION_FAILURE_COUNTER.labels(step=step).inc()


def metrics_payload() -> tuple[bytes, str]:
    """Return the Prometheus metrics payload and content type."""

    _ensure_registry()
    return generate_latest(_REGISTRY or CollectorRegistry()), CONTENT_TYPE_LATEST


def reset_metrics_for_tests() -> None:  # pragma: no cover - test utility
    """Reset the registry so tests can run with a clean state."""

    with _LOCK:
        _initialise_registry()
