"""
Pytest configuration and fixtures.
Adds src/ to Python path so tests can import walletpay without installing it,
and provides in-memory fakes for every walletpay collaborator.
"""

import asyncio
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pytest

# Add the repo root's src/ directory to sys.path
repo_root = Path(__file__).parent.parent
src_path = repo_root / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from walletpay.actions import ActionType, StoreAction  # noqa: E402
from walletpay.core.interaction_lock import InteractionLockRegistry  # noqa: E402
from walletpay.core.trigger import WalletTrigger  # noqa: E402
from walletpay.models import (  # noqa: E402
    CardDetails,
    CardInfo,
    CheckoutSnapshot,
    CheckoutState,
    LineItem,
    PaymentData,
    PaymentDataRequest,
    PaymentMethodConfig,
    RemoteAddress,
    StoreConfig,
    TokenizePayload,
    WalletAddress,
    WalletEnvironment,
)
from walletpay.options import PaymentInitializeOptions, WalletPayOptions  # noqa: E402
from walletpay.wallet.controller import WalletInteractionController  # noqa: E402

METHOD_ID = "walletpay"


class WalletSdkError(Exception):
    """Error raised by the fake wallet client, shaped like the real SDK's."""

    def __init__(self, status_code: str) -> None:
        super().__init__(f"wallet sdk error: {status_code}")
        self.status_code = status_code


class FakeCheckoutStore:
    """Records dispatched actions and applies a tiny subset of them."""

    def __init__(self, state: CheckoutState) -> None:
        self.state = state
        self.actions: List[StoreAction] = []
        self.fail_on: Dict[ActionType, Exception] = {}
        self.billing_address_on_reload: Optional[RemoteAddress] = None

    def dispatched(self, action_type: ActionType) -> List[StoreAction]:
        return [a for a in self.actions if a.type == action_type]

    async def dispatch(self, action: StoreAction) -> CheckoutState:
        self.actions.append(action)
        await asyncio.sleep(0)
        if action.type in self.fail_on:
            raise self.fail_on[action.type]

        if action.type == ActionType.LOAD_PAYMENT_METHOD and self.billing_address_on_reload:
            self.state = replace(self.state, billing_address=self.billing_address_on_reload)
        elif action.type == ActionType.UPDATE_SHIPPING_ADDRESS:
            request = action.payload["address"]
            self.state = replace(
                self.state,
                shipping_address=RemoteAddress(id="ship-1", postal_code=request.postal_code),
            )
        elif action.type == ActionType.UPDATE_BILLING_ADDRESS:
            request = action.payload["address"]
            self.state = replace(
                self.state,
                billing_address=RemoteAddress(id=request.id or "bill-new", postal_code=request.postal_code),
            )
        return self.state

    def get_state(self) -> CheckoutState:
        return self.state


class FakeWalletClient:
    def __init__(self, payment_data: PaymentData) -> None:
        self.ready = True
        self.payment_data = payment_data
        self.ready_error: Optional[Exception] = None
        self.load_error: Optional[Exception] = None
        self.load_gate: Optional[asyncio.Event] = None
        self.ready_calls: List[Any] = []
        self.load_calls: List[PaymentDataRequest] = []
        self.buttons: List[Callable[..., None]] = []

    async def is_ready_to_pay(self, allowed_payment_methods):
        self.ready_calls.append(allowed_payment_methods)
        if self.ready_error:
            raise self.ready_error
        return self.ready

    async def load_payment_data(self, request):
        self.load_calls.append(request)
        if self.load_gate is not None:
            await self.load_gate.wait()
        if self.load_error:
            raise self.load_error
        return self.payment_data

    def create_button(self, on_click):
        self.buttons.append(on_click)
        return {"button": len(self.buttons)}


class FakeWalletSdk:
    def __init__(self, client: FakeWalletClient) -> None:
        self.client = client
        self.environments: List[WalletEnvironment] = []

    def create_payments_client(self, environment):
        self.environments.append(environment)
        return self.client


class FakeScriptLoader:
    def __init__(self, sdk: FakeWalletSdk) -> None:
        self.sdk = sdk
        self.error: Optional[Exception] = None
        self.calls = 0

    async def load(self):
        self.calls += 1
        await asyncio.sleep(0)
        if self.error:
            raise self.error
        return self.sdk


class FakeCapabilityProvider:
    def __init__(self, request: PaymentDataRequest, payload: TokenizePayload) -> None:
        self.request = request
        self.payload = payload
        self.initialize_error: Optional[Exception] = None
        self.parse_error: Optional[Exception] = None
        self.initialize_calls: List[tuple] = []
        self.parsed: List[PaymentData] = []
        self.teardowns = 0

    async def initialize(self, checkout, payment_method, has_shipping_address):
        self.initialize_calls.append((checkout, payment_method, has_shipping_address))
        await asyncio.sleep(0)
        if self.initialize_error:
            raise self.initialize_error
        return self.request

    async def parse_response(self, payment_data):
        self.parsed.append(payment_data)
        if self.parse_error:
            raise self.parse_error
        return self.payload

    async def teardown(self):
        self.teardowns += 1


class FakeRequestSender:
    def __init__(self) -> None:
        self.posts: List[Dict[str, Any]] = []
        self.error: Optional[Exception] = None
        self.gate: Optional[asyncio.Event] = None
        self.in_flight = 0
        self.max_in_flight = 0

    async def post(self, path, *, headers=None, body=None):
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            self.posts.append({"path": path, "headers": dict(headers or {}), "body": dict(body or {})})
            if self.gate is not None:
                await self.gate.wait()
            else:
                await asyncio.sleep(0)
            if self.error:
                raise self.error
            return {"status": 200}
        finally:
            self.in_flight -= 1


class CallbackRecorder:
    def __init__(self) -> None:
        self.errors: List[BaseException] = []
        self.selected = 0

    def on_error(self, error: BaseException) -> None:
        self.errors.append(error)

    def on_payment_select(self) -> None:
        self.selected += 1


@pytest.fixture
def wallet_address():
    return WalletAddress(
        name="Ada Lovelace",
        address1="12 Analytical Row",
        address2="Flat 3",
        address3="",
        locality="London",
        administrative_area="LDN",
        postal_code="N1 9GU",
        country_code="GB",
        phone_number="+44 20 7946 0000",
        company_name="Engines Ltd",
    )


@pytest.fixture
def payment_method():
    return PaymentMethodConfig(id=METHOD_ID, test_mode=True, client_token="tok_client")


@pytest.fixture
def checkout_state(payment_method):
    return CheckoutState(
        payment_methods={METHOD_ID: payment_method},
        store_config=StoreConfig(store_name="Test Store"),
        checkout=CheckoutSnapshot(
            id="checkout-1",
            grand_total=42.5,
            line_items=(LineItem(sku="SKU-1", name="Widget", quantity=1, sale_price=42.5),),
        ),
    )


@pytest.fixture
def payment_data_request():
    return PaymentDataRequest(
        allowed_payment_methods=[{"type": "CARD", "parameters": {"allowedCardNetworks": ["VISA"]}}],
        transaction_info={"totalPrice": "42.50", "currencyCode": "USD"},
    )


@pytest.fixture
def tokenize_payload():
    return TokenizePayload(type="CreditCard", nonce="nonce-123", details=CardDetails(card_type="Visa", last_four="1111"))


@pytest.fixture
def payment_data(wallet_address):
    return PaymentData(
        card_info=CardInfo(card_network="VISA", card_details="1111", billing_address=wallet_address),
        payment_method_token={"token": "opaque"},
        shipping_address=wallet_address,
        email="ada@example.com",
    )


@pytest.fixture
def store(checkout_state):
    return FakeCheckoutStore(checkout_state)


@pytest.fixture
def wallet_client(payment_data):
    return FakeWalletClient(payment_data)


@pytest.fixture
def wallet_sdk(wallet_client):
    return FakeWalletSdk(wallet_client)


@pytest.fixture
def script_loader(wallet_sdk):
    return FakeScriptLoader(wallet_sdk)


@pytest.fixture
def capability_provider(payment_data_request, tokenize_payload):
    return FakeCapabilityProvider(payment_data_request, tokenize_payload)


@pytest.fixture
def request_sender():
    return FakeRequestSender()


@pytest.fixture
def locks():
    return InteractionLockRegistry()


@pytest.fixture
def callbacks():
    return CallbackRecorder()


@pytest.fixture
def trigger():
    return WalletTrigger(name="wallet-button")


@pytest.fixture
def controller(store, script_loader, capability_provider, request_sender, locks):
    return WalletInteractionController(
        store=store,
        script_loader=script_loader,
        capability_provider=capability_provider,
        request_sender=request_sender,
        locks=locks,
    )


@pytest.fixture
def init_options(trigger, callbacks):
    return PaymentInitializeOptions(
        method_id=METHOD_ID,
        walletpay=WalletPayOptions(
            wallet_trigger=trigger,
            on_error=callbacks.on_error,
            on_payment_select=callbacks.on_payment_select,
        ),
    )
