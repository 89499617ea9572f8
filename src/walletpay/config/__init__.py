"""
Configuration package.

This package contains environment-driven settings loading and validation.
"""

from walletpay.config.settings import Settings, env_bool

__all__ = [
    "Settings",
    "env_bool",
]
