"""
Collaborator contracts consumed by the wallet payment core.

Hosts provide implementations of these protocols; walletpay ships defaults
only for the request sender, the address mapper and the trigger.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol

from walletpay.actions import StoreAction
from walletpay.models import (
    AddressRequest,
    CheckoutSnapshot,
    CheckoutState,
    PaymentData,
    PaymentDataRequest,
    PaymentMethodConfig,
    TokenizePayload,
    WalletAddress,
    WalletEnvironment,
)


class WalletClient(Protocol):
    """
    Payments client created by the wallet SDK.

    Failures are raised as exceptions; a ``status_code`` attribute, when
    present, is carried into ProviderError.
    """

    async def is_ready_to_pay(self, allowed_payment_methods: List[Dict[str, Any]]) -> bool:
        ...

    async def load_payment_data(self, request: PaymentDataRequest) -> PaymentData:
        ...

    def create_button(self, on_click: Callable[..., None]) -> Any:
        ...


class WalletSdk(Protocol):
    def create_payments_client(self, environment: WalletEnvironment) -> WalletClient:
        ...


class ScriptLoader(Protocol):
    async def load(self) -> WalletSdk:
        ...


class WalletCapabilityProvider(Protocol):
    async def initialize(
        self,
        checkout: CheckoutSnapshot,
        payment_method: PaymentMethodConfig,
        has_shipping_address: bool,
    ) -> PaymentDataRequest:
        ...

    async def parse_response(self, payment_data: PaymentData) -> TokenizePayload:
        ...

    async def teardown(self) -> None:
        ...


class CheckoutStore(Protocol):
    """Host state container. All mutations go through dispatch."""

    async def dispatch(self, action: StoreAction) -> CheckoutState:
        ...

    def get_state(self) -> CheckoutState:
        ...


class RequestSender(Protocol):
    async def post(
        self,
        path: str,
        *,
        headers: Optional[Mapping[str, str]] = None,
        body: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        ...


class AddressMapper(Protocol):
    def __call__(self, address: WalletAddress, address_id: Optional[str] = None) -> AddressRequest:
        ...


class TriggerEvent(Protocol):
    def prevent_default(self) -> None:
        ...


TriggerHandler = Callable[[TriggerEvent], None]


class Trigger(Protocol):
    """Element the host binds the wallet activation to."""

    def add_listener(self, handler: TriggerHandler) -> None:
        ...

    def remove_listener(self, handler: TriggerHandler) -> None:
        ...
