"""
Prometheus metrics for the wallet payment flow.
"""

from prometheus_client import Counter, Histogram, CollectorRegistry
from typing import Optional


class WalletMetrics:
    """Counters and latency for configuration, interactions and submissions."""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        reg = registry or CollectorRegistry()

        # === Configuration ===
        self.configurations = Counter(
            'wallet_configurations_total',
            'Configuration cycles by outcome',
            labelnames=['method_id', 'outcome'],
            registry=reg
        )

        # === Interaction ===
        self.interactions_started = Counter(
            'wallet_interactions_started_total',
            'Wallet interaction pipelines started',
            labelnames=['method_id'],
            registry=reg
        )
        self.readiness_declined = Counter(
            'wallet_readiness_declined_total',
            'Readiness checks answered with not ready',
            labelnames=['method_id'],
            registry=reg
        )
        self.provider_errors = Counter(
            'wallet_provider_errors_total',
            'Wallet client failures',
            labelnames=['method_id', 'status_code'],
            registry=reg
        )

        # === Submission ===
        self.submissions = Counter(
            'wallet_submissions_total',
            'Checkout submissions by outcome',
            labelnames=['method_id', 'outcome'],
            registry=reg
        )
        self.submission_latency_ms = Histogram(
            'wallet_submission_latency_ms',
            'Time from form post to reconciled state (milliseconds)',
            labelnames=['method_id'],
            buckets=[50, 100, 250, 500, 1000, 2500, 5000, 10000],
            registry=reg
        )

        self._registry = reg

    def get_registry(self) -> CollectorRegistry:
        return self._registry
