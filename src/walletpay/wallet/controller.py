"""
WalletInteractionController: coordination layer for one wallet payment method.

The controller owns the trigger -> readiness check -> payment data ->
parse -> submit pipeline and delegates each step to a specialized part:
    - WalletConfigurator: configuration cycle and the wallet session
    - AddressSynchronizer: wallet addresses into the checkout store
    - SubmissionPipeline: form post and state reconciliation
    - WalletStateMachine: lifecycle state and audit trail

Usage:
    controller = WalletInteractionController(
        store=store,
        script_loader=loader,
        capability_provider=provider,
        request_sender=HttpRequestSender(settings.base_url),
    )
    await controller.initialize(PaymentInitializeOptions(
        method_id="walletpay",
        walletpay=WalletPayOptions(wallet_trigger=trigger, on_error=show_error),
    ))
    trigger.activate()   # from inside the running event loop
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, Optional, Set, TYPE_CHECKING

from walletpay.config.settings import Settings
from walletpay.core.interaction_lock import InteractionLockRegistry
from walletpay.core.state_machine import WalletState, WalletStateMachine
from walletpay.errors import InvalidArgumentError, NotInitializedError, ProviderError
from walletpay.infra import logging_cfg
from walletpay.models import CheckoutState, PaymentOutcome, WalletAddress
from walletpay.options import PaymentInitializeOptions, WalletPayOptions
from walletpay.wallet.address_sync import AddressSynchronizer
from walletpay.wallet.configurator import WalletConfigurator, WalletSession
from walletpay.wallet.submission import SubmissionConfig, SubmissionPipeline, SubmissionResult

if TYPE_CHECKING:
    from walletpay.interfaces import (
        AddressMapper,
        CheckoutStore,
        RequestSender,
        ScriptLoader,
        Trigger,
        TriggerEvent,
        WalletCapabilityProvider,
    )
    from walletpay.monitoring.metrics import WalletMetrics

log = logging.getLogger("walletpay")

UNKNOWN_STATUS_CODE = "INTERNAL_ERROR"


class WalletInteractionController:
    """
    Runs wallet interactions for one payment method.

    Interactions are serialized: a second activation while one is running
    waits for it to finish. Submissions additionally hold the named
    interaction lock shared by every controller of the same payment method.
    """

    def __init__(
        self,
        store: "CheckoutStore",
        script_loader: "ScriptLoader",
        capability_provider: "WalletCapabilityProvider",
        request_sender: "RequestSender",
        address_mapper: Optional["AddressMapper"] = None,
        settings: Optional[Settings] = None,
        locks: Optional[InteractionLockRegistry] = None,
        metrics: Optional["WalletMetrics"] = None,
        log_event: Optional[Callable[..., None]] = None,
    ) -> None:
        self._store = store
        self._capability_provider = capability_provider
        self.settings = settings or Settings.defaults()
        self._metrics = metrics
        self._log_event = log_event or self._default_log

        self.state_machine = WalletStateMachine(log_event=log_event)
        self.configurator = WalletConfigurator(
            store=store,
            script_loader=script_loader,
            capability_provider=capability_provider,
            state_machine=self.state_machine,
            metrics=metrics,
            log_event=log_event,
        )
        self.address_synchronizer = AddressSynchronizer(
            store=store,
            method_id_getter=lambda: self._method_id,
            address_mapper=address_mapper,
            log_event=log_event,
        )
        self.submission = SubmissionPipeline(
            store=store,
            request_sender=request_sender,
            config=SubmissionConfig.from_settings(self.settings),
            locks=locks,
            metrics=metrics,
            log_event=log_event,
        )

        self._method_id: Optional[str] = None
        self._options: Optional[WalletPayOptions] = None
        self._trigger: Optional["Trigger"] = None
        self._interaction_lock = asyncio.Lock()
        self._tasks: Set[asyncio.Task] = set()

        # Captured once so add_listener/remove_listener see the same object
        self._activation_handler = self.on_trigger_activated

    def _default_log(self, event: str, **kwargs: Any) -> None:
        logging_cfg.log_event(log, event, **{"method_id": self._method_id, **kwargs})

    @property
    def method_id(self) -> Optional[str]:
        return self._method_id

    @property
    def state(self) -> WalletState:
        return self.state_machine.state

    @property
    def session(self) -> Optional[WalletSession]:
        return self.configurator.session

    # ========== Lifecycle ==========

    async def initialize(self, options: Optional[PaymentInitializeOptions]) -> None:
        if options is None or options.walletpay is None:
            raise InvalidArgumentError(
                'Unable to initialize payment because "options.walletpay" argument is not provided.'
            )
        wallet_options = options.walletpay
        if not callable(wallet_options.on_error) or not callable(wallet_options.on_payment_select):
            raise InvalidArgumentError(
                'Unable to initialize payment because "options.walletpay" callbacks must be callable.'
            )

        self._method_id = options.method_id
        self._options = wallet_options
        self.state_machine.method_id = options.method_id or ""

        if wallet_options.wallet_trigger is not None:
            self._detach_trigger()
            self._trigger = wallet_options.wallet_trigger
            self._trigger.add_listener(self._activation_handler)

        await self.configurator.configure(self._method_id)

    async def deinitialize(self) -> None:
        """
        Detach the trigger and tear down the capability provider.

        Interactions already running are left to finish on their own.
        """
        self._detach_trigger()
        await self._capability_provider.teardown()
        self.configurator.reset()
        self.state_machine.reset()
        self._log_event("wallet_deinitialized", pending_interactions=len(self._tasks))

    def _detach_trigger(self) -> None:
        if self._trigger is not None:
            self._trigger.remove_listener(self._activation_handler)
        self._trigger = None

    async def wait_idle(self) -> None:
        """Wait for every scheduled interaction to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # ========== Trigger ==========

    def on_trigger_activated(self, event: "TriggerEvent") -> None:
        """
        Trigger listener.

        Must be called from inside the running event loop; the pipeline runs
        as a task and its failures are routed to on_error.
        """
        event.prevent_default()

        if not self.configurator.is_ready:
            self._log_event("wallet_activation_rejected", reason="not_initialized")
            raise NotInitializedError()

        task = asyncio.get_running_loop().create_task(self._run_interaction())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def create_button(self) -> Any:
        """Ask the wallet client for a button wired to the activation handler."""
        session = self.configurator.require_session()
        return session.client.create_button(on_click=self._activation_handler)

    async def _run_interaction(self) -> None:
        try:
            await self.display_wallet()
        except Exception as exc:
            self._log_event(
                "wallet_interaction_failed",
                error_type=type(exc).__name__,
                error=str(exc),
            )
            self._notify_error(exc)

    # ========== Interaction pipeline ==========

    async def display_wallet(self) -> Optional[SubmissionResult]:
        """
        Run one wallet interaction.

        Returns:
            SubmissionResult, or None when the wallet reported it cannot pay

        Raises:
            NotInitializedError: no configuration cycle has completed
            ProviderError: the wallet client failed
        """
        session = self.configurator.require_session()
        options = self._options or WalletPayOptions()

        async with self._interaction_lock:
            return await self._interact(session, options)

    async def _interact(self, session: WalletSession, options: WalletPayOptions) -> Optional[SubmissionResult]:
        method_id = session.method_id
        request = session.payment_data_request

        self.state_machine.transition(WalletState.CHECKING_READINESS, reason="activation")
        if self._metrics:
            self._metrics.interactions_started.labels(method_id=method_id).inc()

        try:
            ready = await session.client.is_ready_to_pay(request.allowed_payment_methods)
        except Exception as exc:
            raise self._provider_failure(method_id, exc, stage="is_ready_to_pay") from exc

        if not ready:
            if self._metrics:
                self._metrics.readiness_declined.labels(method_id=method_id).inc()
            self._log_event("wallet_not_ready")
            self.state_machine.transition(WalletState.READY, reason="not_ready")
            return None

        self.state_machine.transition(WalletState.LOADING_PAYMENT_DATA, reason="ready_to_pay")
        try:
            payment_data = await session.client.load_payment_data(request)
        except Exception as exc:
            raise self._provider_failure(method_id, exc, stage="load_payment_data") from exc

        self.state_machine.transition(WalletState.PARSING_RESPONSE, reason="payment_data_loaded")
        try:
            tokenize_payload = await self._capability_provider.parse_response(payment_data)
        except Exception as exc:
            self.state_machine.fail("parse_failed", error=str(exc))
            raise

        outcome = PaymentOutcome(
            tokenize_payload=tokenize_payload,
            billing_address=payment_data.card_info.billing_address,
            shipping_address=payment_data.shipping_address,
            email=payment_data.email,
        )
        await self._sync_shipping_address(outcome)

        self.state_machine.transition(WalletState.SUBMITTING_FORM, reason="payload_parsed")
        try:
            result = await self.submission.submit(outcome, method_id, options)
        except Exception as exc:
            self.state_machine.fail("submission_error", error=str(exc))
            raise
        self.state_machine.transition(
            WalletState.READY,
            reason="submitted" if result.success else "submission_failed",
        )
        return result

    async def _sync_shipping_address(self, outcome: PaymentOutcome) -> None:
        """Push the wallet shipping address when the checkout has none yet. Best effort."""
        if outcome.shipping_address is None:
            return
        if self._store.get_state().get_shipping_address() is not None:
            return
        try:
            await self.address_synchronizer.update_shipping_address(outcome.shipping_address)
        except Exception as exc:
            self._log_event("shipping_address_sync_failed", error=str(exc))

    def _provider_failure(self, method_id: str, error: Exception, stage: str) -> ProviderError:
        status_code = getattr(error, "status_code", None) or UNKNOWN_STATUS_CODE
        provider_error = ProviderError(str(status_code))

        self.state_machine.fail(f"{stage}_failed", status_code=provider_error.status_code)
        if self._metrics:
            self._metrics.provider_errors.labels(
                method_id=method_id, status_code=provider_error.status_code
            ).inc()
        self._log_event("wallet_provider_error", stage=stage, status_code=provider_error.status_code)
        return provider_error

    def _notify_error(self, error: BaseException) -> None:
        options = self._options or WalletPayOptions()
        try:
            options.on_error(error)
        except Exception as exc:
            self._log_event("error_callback_error", error=str(exc))

    # ========== Address synchronization ==========

    async def update_shipping_address(self, address: Optional[WalletAddress]) -> Optional[CheckoutState]:
        return await self.address_synchronizer.update_shipping_address(address)

    async def update_billing_address(self, address: Optional[WalletAddress]) -> Optional[CheckoutState]:
        return await self.address_synchronizer.update_billing_address(address)

    # ========== Stats ==========

    def get_stats(self) -> Dict[str, Any]:
        return {
            "method_id": self._method_id,
            "state": self.state_machine.state.name,
            "configured": self.configurator.is_ready,
            "trigger_attached": self._trigger is not None,
            "pending_interactions": len(self._tasks),
            "state_machine": self.state_machine.get_stats(),
        }
