"""
Wallet package.

This package contains the configurator, the interaction controller, the
address synchronizer and the submission pipeline.
"""

from walletpay.wallet.address_sync import AddressSynchronizer
from walletpay.wallet.configurator import WalletConfigurator, WalletSession, select_environment
from walletpay.wallet.controller import WalletInteractionController
from walletpay.wallet.submission import (
    FORM_HEADERS,
    SubmissionConfig,
    SubmissionPipeline,
    SubmissionResult,
    card_information,
)

__all__ = [
    "AddressSynchronizer",
    "WalletConfigurator",
    "WalletSession",
    "select_environment",
    "WalletInteractionController",
    "FORM_HEADERS",
    "SubmissionConfig",
    "SubmissionPipeline",
    "SubmissionResult",
    "card_information",
]
