"""
Data model shared by the configurator, the interaction controller and the
submission pipeline.

Everything read from the host store is a frozen snapshot. The store is only
ever changed through dispatched actions (see walletpay.actions).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence


class WalletEnvironment(Enum):
    """Wallet client environment."""
    TEST = "TEST"              # Sandbox endpoint
    PRODUCTION = "PRODUCTION"


@dataclass(frozen=True)
class PaymentMethodConfig:
    """Payment method snapshot loaded once per configuration cycle."""
    id: str
    test_mode: Optional[bool] = None
    client_token: Optional[str] = None
    initialization_data: Dict[str, Any] = field(default_factory=dict)
    merchant_id: Optional[str] = None
    display_name: Optional[str] = None


@dataclass(frozen=True)
class StoreConfig:
    """Store-level checkout configuration."""
    store_name: str
    currency_code: str = "USD"
    checkout_settings: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class LineItem:
    sku: str
    name: str
    quantity: int
    sale_price: float


@dataclass(frozen=True)
class CheckoutSnapshot:
    """Read-only view of the in-progress order."""
    id: str
    grand_total: float
    currency_code: str = "USD"
    line_items: Sequence[LineItem] = ()


@dataclass(frozen=True)
class WalletAddress:
    """Address as returned by the wallet provider."""
    name: str = ""
    address1: str = ""
    address2: str = ""
    address3: str = ""
    locality: str = ""
    administrative_area: str = ""
    postal_code: str = ""
    country_code: str = ""
    phone_number: str = ""
    company_name: str = ""


@dataclass(frozen=True)
class AddressRequest:
    """Address update request in the shape the checkout store expects."""
    first_name: str
    last_name: str
    company: str
    address1: str
    address2: str
    city: str
    state_or_province: str
    state_or_province_code: str
    postal_code: str
    country_code: str
    phone: str
    id: Optional[str] = None
    custom_fields: Sequence[Dict[str, Any]] = ()


@dataclass(frozen=True)
class RemoteAddress:
    """Address already stored on the checkout backend."""
    id: str
    postal_code: str = ""
    country_code: str = ""


@dataclass(frozen=True)
class CardInfo:
    """Card metadata attached to the wallet response."""
    card_network: str = ""
    card_details: str = ""
    billing_address: Optional[WalletAddress] = None


@dataclass(frozen=True)
class PaymentData:
    """Raw payment data returned by the wallet client."""
    card_info: CardInfo
    payment_method_token: Dict[str, Any] = field(default_factory=dict)
    shipping_address: Optional[WalletAddress] = None
    email: Optional[str] = None


@dataclass(frozen=True)
class PaymentDataRequest:
    """Descriptor built by the capability provider for the wallet client."""
    allowed_payment_methods: List[Dict[str, Any]]
    transaction_info: Dict[str, Any] = field(default_factory=dict)
    merchant_info: Dict[str, Any] = field(default_factory=dict)
    email_required: bool = True
    shipping_address_required: bool = False
    api_version: int = 2
    api_version_minor: int = 0


@dataclass(frozen=True)
class CardDetails:
    card_type: str
    last_four: str


@dataclass(frozen=True)
class TokenizePayload:
    """Single-use payment credential parsed from the wallet response."""
    type: str
    nonce: str
    details: CardDetails


@dataclass(frozen=True)
class PaymentOutcome:
    """Everything the submission pipeline needs for one attempt."""
    tokenize_payload: TokenizePayload
    billing_address: Optional[WalletAddress] = None
    shipping_address: Optional[WalletAddress] = None
    email: Optional[str] = None


@dataclass(frozen=True)
class CheckoutState:
    """
    Snapshot returned by the host store after a dispatch.

    Selectors return None when the piece is not loaded.
    """
    payment_methods: Dict[str, PaymentMethodConfig] = field(default_factory=dict)
    store_config: Optional[StoreConfig] = None
    checkout: Optional[CheckoutSnapshot] = None
    shipping_address: Optional[RemoteAddress] = None
    billing_address: Optional[RemoteAddress] = None

    def get_payment_method(self, method_id: str) -> Optional[PaymentMethodConfig]:
        return self.payment_methods.get(method_id)

    def get_store_config(self) -> Optional[StoreConfig]:
        return self.store_config

    def get_checkout(self) -> Optional[CheckoutSnapshot]:
        return self.checkout

    def get_shipping_address(self) -> Optional[RemoteAddress]:
        return self.shipping_address

    def get_billing_address(self) -> Optional[RemoteAddress]:
        return self.billing_address
