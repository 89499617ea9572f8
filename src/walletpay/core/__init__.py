"""
Core utilities package.

This package contains the wallet state machine, the named interaction locks,
the trigger abstraction and error normalization.
"""

from walletpay.core.error_reporter import ErrorReporter
from walletpay.core.interaction_lock import InteractionLockRegistry, default_registry, interaction_key
from walletpay.core.state_machine import StateTransition, WalletState, WalletStateMachine, VALID_TRANSITIONS
from walletpay.core.trigger import ActivationEvent, WalletTrigger

__all__ = [
    "ErrorReporter",
    "InteractionLockRegistry",
    "default_registry",
    "interaction_key",
    "StateTransition",
    "WalletState",
    "WalletStateMachine",
    "VALID_TRANSITIONS",
    "ActivationEvent",
    "WalletTrigger",
]
