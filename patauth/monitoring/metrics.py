"""Prometheus metrics for the token lifecycle.

Counters are registered once per process on first use of ``get_registry()``.
"""
from __future__ import annotations

from typing import Optional

from prometheus_client import CollectorRegistry, Counter, REGISTRY


class MetricsRegistry:
    def __init__(self, registry: CollectorRegistry = REGISTRY):
        self.tokens_issued = Counter(
            "patauth_tokens_issued_total", "Personal access tokens issued", registry=registry
        )
        self.validations = Counter(
            "patauth_token_validations_total", "Token validations by outcome", ["result"], registry=registry
        )
        self.tokens_revoked = Counter(
            "patauth_tokens_revoked_total", "Personal access tokens revoked", registry=registry
        )
        self.touch_failures = Counter(
            "patauth_touch_failures_total", "Background last-used updates that failed", registry=registry
        )

    def observe_issued(self) -> None:
        self.tokens_issued.inc()

    def observe_validation(self, result: str) -> None:
        self.validations.labels(result=result).inc()

    def observe_revoked(self) -> None:
        self.tokens_revoked.inc()

    def observe_touch_failure(self) -> None:
        self.touch_failures.inc()


_registry: Optional[MetricsRegistry] = None


def get_registry() -> MetricsRegistry:
    global _registry
    if _registry is None:
        _registry = MetricsRegistry()
    return _registry


__all__ = ["get_registry", "MetricsRegistry"]
