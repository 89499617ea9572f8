"""
Error taxonomy for the wallet payment flow.

Validation errors (InvalidArgumentError, NotInitializedError,
NotConfiguredError) are raised straight to the caller. Configuration
failures from the script loader or the capability provider are normalized
into ConfigurationError. Wallet client failures surface as ProviderError
with the provider's status code.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class WalletPayError(Exception):
    """Base class for every error raised by walletpay."""


class InvalidArgumentError(WalletPayError):
    """A required initialization option was not provided."""


class MissingConfigurationType(Enum):
    MISSING_PAYMENT_METHOD = "missing_payment_method"
    MISSING_CHECKOUT_CONFIG = "missing_checkout_config"
    MISSING_CHECKOUT = "missing_checkout"


_MISSING_MESSAGES = {
    MissingConfigurationType.MISSING_PAYMENT_METHOD: (
        "Unable to proceed because payment method data is unavailable or not properly configured."
    ),
    MissingConfigurationType.MISSING_CHECKOUT_CONFIG: (
        "Unable to proceed because the checkout configuration is unavailable."
    ),
    MissingConfigurationType.MISSING_CHECKOUT: (
        "Unable to proceed because checkout data is unavailable."
    ),
}


class MissingConfigurationError(WalletPayError):
    """Required state is absent from the checkout store."""

    def __init__(self, variant: MissingConfigurationType, message: Optional[str] = None) -> None:
        super().__init__(message or _MISSING_MESSAGES[variant])
        self.variant = variant


class NotInitializedError(WalletPayError):
    """A wallet interaction was attempted before configuration completed."""

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(
            message
            or "Unable to proceed because the wallet payment has not been initialized."
        )


class NotConfiguredError(WalletPayError):
    """An address update was attempted before a payment method id was known."""

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(
            message
            or "Unable to synchronize addresses because no payment method has been configured."
        )


class ProviderError(WalletPayError):
    """The wallet client rejected a readiness check or payment-data request."""

    def __init__(self, status_code: str, message: Optional[str] = None) -> None:
        super().__init__(message or status_code)
        self.status_code = status_code


class StandardError(WalletPayError):
    """Normalized wrapper carrying the message of an underlying failure."""


class ConfigurationError(StandardError):
    """A configuration cycle failed in the script loader or capability provider."""
