"""
walletpay - orchestration of wallet button payments for a checkout.

Configure a payment method, bind a trigger, run readiness check and
payment-data retrieval through the wallet client, and submit the tokenized
result to the checkout backend one interaction at a time.
"""

from walletpay.address_mapping import map_wallet_address
from walletpay.config.settings import Settings
from walletpay.core.interaction_lock import InteractionLockRegistry
from walletpay.core.state_machine import WalletState
from walletpay.core.trigger import ActivationEvent, WalletTrigger
from walletpay.errors import (
    ConfigurationError,
    InvalidArgumentError,
    MissingConfigurationError,
    MissingConfigurationType,
    NotConfiguredError,
    NotInitializedError,
    ProviderError,
    StandardError,
    WalletPayError,
)
from walletpay.factory import ControllerDependencies, create_controller
from walletpay.infra.request_sender import HttpRequestSender
from walletpay.interfaces import (
    AddressMapper,
    CheckoutStore,
    RequestSender,
    ScriptLoader,
    Trigger,
    WalletCapabilityProvider,
    WalletClient,
    WalletSdk,
)
from walletpay.options import PaymentInitializeOptions, WalletPayOptions
from walletpay.wallet.controller import WalletInteractionController

__version__ = "0.1.0"

__all__ = [
    "map_wallet_address",
    "Settings",
    "InteractionLockRegistry",
    "WalletState",
    "ActivationEvent",
    "WalletTrigger",
    "ConfigurationError",
    "InvalidArgumentError",
    "MissingConfigurationError",
    "MissingConfigurationType",
    "NotConfiguredError",
    "NotInitializedError",
    "ProviderError",
    "StandardError",
    "WalletPayError",
    "HttpRequestSender",
    "AddressMapper",
    "CheckoutStore",
    "RequestSender",
    "ScriptLoader",
    "Trigger",
    "WalletCapabilityProvider",
    "WalletClient",
    "WalletSdk",
    "ControllerDependencies",
    "create_controller",
    "PaymentInitializeOptions",
    "WalletPayOptions",
    "WalletInteractionController",
]
