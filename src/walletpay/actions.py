"""
Actions dispatched to the host checkout store.

The store is opaque: walletpay only builds these action records and hands
them to ``CheckoutStore.dispatch``. How the host applies them is its own
business.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Optional

from walletpay.models import AddressRequest


class ActionType(Enum):
    LOAD_PAYMENT_METHOD = auto()
    LOAD_CURRENT_CHECKOUT = auto()
    UPDATE_SHIPPING_ADDRESS = auto()
    UPDATE_BILLING_ADDRESS = auto()
    WIDGET_INTERACTION_STARTED = auto()
    WIDGET_INTERACTION_FINISHED = auto()
    WIDGET_INTERACTION_FAILED = auto()


@dataclass(frozen=True)
class StoreAction:
    type: ActionType
    payload: Dict[str, Any] = field(default_factory=dict)
    meta: Dict[str, Any] = field(default_factory=dict)


def load_payment_method(method_id: str) -> StoreAction:
    return StoreAction(ActionType.LOAD_PAYMENT_METHOD, meta={"method_id": method_id})


def load_current_checkout() -> StoreAction:
    return StoreAction(ActionType.LOAD_CURRENT_CHECKOUT)


def update_shipping_address(address: AddressRequest) -> StoreAction:
    return StoreAction(ActionType.UPDATE_SHIPPING_ADDRESS, payload={"address": address})


def update_billing_address(address: AddressRequest) -> StoreAction:
    return StoreAction(ActionType.UPDATE_BILLING_ADDRESS, payload={"address": address})


def widget_interaction(
    stage: ActionType,
    method_id: str,
    error: Optional[BaseException] = None,
) -> StoreAction:
    """Build a started/finished/failed action for the interaction lock holder."""
    payload: Dict[str, Any] = {}
    if error is not None:
        payload["error"] = error
    return StoreAction(stage, payload=payload, meta={"method_id": method_id})
