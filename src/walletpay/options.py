"""
Host-supplied options for the wallet payment flow.

Every optional callback has a no-op default so the controller can call them
unconditionally.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from walletpay.interfaces import Trigger


def _noop_error(error: BaseException) -> None:
    return None


def _noop() -> None:
    return None


@dataclass
class WalletPayOptions:
    """
    Callbacks and trigger for one wallet payment method.

    wallet_trigger is resolved by the host before construction; walletpay
    never looks elements up on its own.
    """
    wallet_trigger: Optional["Trigger"] = None
    on_error: Callable[[BaseException], None] = field(default=_noop_error)
    on_payment_select: Callable[[], None] = field(default=_noop)


@dataclass
class PaymentInitializeOptions:
    """Arguments for WalletInteractionController.initialize."""
    method_id: str
    walletpay: Optional[WalletPayOptions] = None
