"""
Monitoring package.

This package contains the Prometheus metrics for wallet payments.
"""

from walletpay.monitoring.metrics import WalletMetrics

__all__ = [
    "WalletMetrics",
]
