"""
WalletConfigurator: loads configuration and produces the wallet session.

A configuration cycle:
    1. Reload the payment method through the store
    2. Check payment method, store config and checkout are all present
    3. Pick the wallet environment from the payment method's test flag
    4. Load the wallet SDK and build the payment-data request concurrently
    5. Create the payments client and keep everything in a WalletSession

The session is owned here until reset(); the interaction controller only
reads it.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, TYPE_CHECKING

from walletpay import actions
from walletpay.core.error_reporter import ErrorReporter
from walletpay.core.state_machine import WalletState, WalletStateMachine
from walletpay.errors import MissingConfigurationError, MissingConfigurationType, NotInitializedError
from walletpay.infra import logging_cfg
from walletpay.models import PaymentDataRequest, PaymentMethodConfig, WalletEnvironment

if TYPE_CHECKING:
    from walletpay.interfaces import CheckoutStore, ScriptLoader, WalletCapabilityProvider, WalletClient
    from walletpay.monitoring.metrics import WalletMetrics

log = logging.getLogger("walletpay")


@dataclass(frozen=True)
class WalletSession:
    """Everything a successful configuration cycle produced."""
    payment_method: PaymentMethodConfig
    environment: WalletEnvironment
    client: "WalletClient"
    payment_data_request: PaymentDataRequest
    has_shipping_address: bool

    @property
    def method_id(self) -> str:
        return self.payment_method.id


def select_environment(payment_method: PaymentMethodConfig) -> WalletEnvironment:
    """
    Map the payment method's test flag onto a wallet environment.

    An unset flag means the payment method is not properly configured.
    """
    if payment_method.test_mode is None:
        raise MissingConfigurationError(MissingConfigurationType.MISSING_PAYMENT_METHOD)
    return WalletEnvironment.TEST if payment_method.test_mode else WalletEnvironment.PRODUCTION


class WalletConfigurator:
    def __init__(
        self,
        store: "CheckoutStore",
        script_loader: "ScriptLoader",
        capability_provider: "WalletCapabilityProvider",
        state_machine: WalletStateMachine,
        error_reporter: Optional[ErrorReporter] = None,
        metrics: Optional["WalletMetrics"] = None,
        log_event: Optional[Callable[..., None]] = None,
    ) -> None:
        self._store = store
        self._script_loader = script_loader
        self._capability_provider = capability_provider
        self._state = state_machine
        self._error_reporter = error_reporter or ErrorReporter()
        self._metrics = metrics
        self._log_event = log_event or self._default_log

        self._session: Optional[WalletSession] = None

    def _default_log(self, event: str, **kwargs: Any) -> None:
        logging_cfg.log_event(log, event, **kwargs)

    @property
    def session(self) -> Optional[WalletSession]:
        return self._session

    @property
    def is_ready(self) -> bool:
        return self._session is not None

    def require_session(self) -> WalletSession:
        if self._session is None:
            raise NotInitializedError()
        return self._session

    def reset(self) -> None:
        """Discard the session. In-flight interactions keep their own reference."""
        self._session = None

    async def configure(self, method_id: Optional[str]) -> WalletSession:
        if not method_id:
            raise MissingConfigurationError(MissingConfigurationType.MISSING_PAYMENT_METHOD)

        self._session = None
        self._state.transition(WalletState.CONFIGURING, reason="configure")

        try:
            state = await self._store.dispatch(actions.load_payment_method(method_id))

            payment_method = state.get_payment_method(method_id)
            store_config = state.get_store_config()
            checkout = state.get_checkout()
            has_shipping_address = state.get_shipping_address() is not None

            if payment_method is None:
                raise MissingConfigurationError(MissingConfigurationType.MISSING_PAYMENT_METHOD)
            if store_config is None:
                raise MissingConfigurationError(MissingConfigurationType.MISSING_CHECKOUT_CONFIG)
            if checkout is None:
                raise MissingConfigurationError(MissingConfigurationType.MISSING_CHECKOUT)

            environment = select_environment(payment_method)
        except Exception as exc:
            self._fail(method_id, exc)
            raise

        results = await asyncio.gather(
            self._script_loader.load(),
            self._capability_provider.initialize(checkout, payment_method, has_shipping_address),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, Exception):
                self._fail(method_id, result)
                self._error_reporter.raise_normalized(result, stage="configure")
            if isinstance(result, BaseException):
                raise result

        sdk, payment_data_request = results
        try:
            client = sdk.create_payments_client(environment)
        except Exception as exc:
            self._fail(method_id, exc)
            self._error_reporter.raise_normalized(exc, stage="create_client")

        self._session = WalletSession(
            payment_method=payment_method,
            environment=environment,
            client=client,
            payment_data_request=payment_data_request,
            has_shipping_address=has_shipping_address,
        )
        self._state.transition(WalletState.READY, reason="configured")
        if self._metrics:
            self._metrics.configurations.labels(method_id=method_id, outcome="ready").inc()
        self._log_event(
            "wallet_configured",
            method_id=method_id,
            environment=environment.value,
            has_shipping_address=has_shipping_address,
        )
        return self._session

    def _fail(self, method_id: str, error: BaseException) -> None:
        self._state.fail("configure_failed", error=str(error))
        if self._metrics:
            self._metrics.configurations.labels(method_id=method_id, outcome="failed").inc()
        self._log_event(
            "wallet_configure_failed",
            method_id=method_id,
            error_type=type(error).__name__,
            error=str(error),
        )
