"""
SubmissionPipeline: posts the tokenized payment to the checkout backend.

One submission:
    1. Take the named interaction lock for the payment method (queue behind
       any submission already running)
    2. Post the form-encoded payment to the checkout endpoint
    3. Reload checkout and payment method concurrently
    4. Report to on_payment_select, or to on_error on any failure

Failures never propagate out of submit(); a failed attempt is final for
that attempt only.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, TYPE_CHECKING

from walletpay import actions
from walletpay.actions import ActionType
from walletpay.core.interaction_lock import InteractionLockRegistry, default_registry, interaction_key
from walletpay.infra import logging_cfg
from walletpay.models import CardDetails, PaymentOutcome

if TYPE_CHECKING:
    from walletpay.config.settings import Settings
    from walletpay.interfaces import CheckoutStore, RequestSender
    from walletpay.monitoring.metrics import WalletMetrics
    from walletpay.options import WalletPayOptions

log = logging.getLogger("walletpay")

FORM_HEADERS = {
    "Accept": "text/html",
    "Content-Type": "application/x-www-form-urlencoded",
}


@dataclass
class SubmissionConfig:
    """Configuration for SubmissionPipeline."""
    checkout_path: str = "/checkout.php"
    provider_tag: str = "walletpay"
    checkout_action: str = "set_external_checkout"
    interaction_queue: str = "widgetInteraction"

    @classmethod
    def from_settings(cls, settings: "Settings") -> "SubmissionConfig":
        return cls(
            checkout_path=settings.checkout_path,
            provider_tag=settings.provider_tag,
            interaction_queue=settings.interaction_queue,
        )


@dataclass
class SubmissionResult:
    """Result of one submission attempt."""
    success: bool
    error: Optional[BaseException] = None
    duration_ms: float = 0.0


def card_information(details: CardDetails) -> Dict[str, str]:
    return {
        "type": details.card_type,
        "number": details.last_four,
    }


class SubmissionPipeline:
    def __init__(
        self,
        store: "CheckoutStore",
        request_sender: "RequestSender",
        config: Optional[SubmissionConfig] = None,
        locks: Optional[InteractionLockRegistry] = None,
        metrics: Optional["WalletMetrics"] = None,
        log_event: Optional[Callable[..., None]] = None,
    ) -> None:
        self._store = store
        self._request_sender = request_sender
        self.config = config or SubmissionConfig()
        self._locks = locks or default_registry
        self._metrics = metrics
        self._log_event = log_event or self._default_log

    def _default_log(self, event: str, **kwargs: Any) -> None:
        logging_cfg.log_event(log, event, **kwargs)

    def build_form(self, outcome: PaymentOutcome) -> Dict[str, Any]:
        payload = outcome.tokenize_payload
        return {
            "payment_type": payload.type,
            "nonce": payload.nonce,
            "provider": self.config.provider_tag,
            "action": self.config.checkout_action,
            "card_information": card_information(payload.details),
        }

    async def submit(
        self,
        outcome: PaymentOutcome,
        method_id: str,
        options: "WalletPayOptions",
    ) -> SubmissionResult:
        lock_name = interaction_key(self.config.interaction_queue, method_id)
        start = time.perf_counter()

        try:
            async with self._locks.hold(lock_name):
                start = time.perf_counter()
                try:
                    await self._post_and_reload(outcome, method_id)
                except Exception as exc:
                    return await self._failed(method_id, options, exc, start)

                duration_ms = (time.perf_counter() - start) * 1000
                if self._metrics:
                    self._metrics.submissions.labels(method_id=method_id, outcome="success").inc()
                    self._metrics.submission_latency_ms.labels(method_id=method_id).observe(duration_ms)
                self._log_event("submission_succeeded", method_id=method_id, duration_ms=round(duration_ms, 2))
        except Exception as exc:
            # the lock itself could not be taken
            return await self._failed(method_id, options, exc, start)

        try:
            options.on_payment_select()
        except Exception as exc:
            self._log_event("payment_select_callback_error", method_id=method_id, error=str(exc))
            self._notify_error(options, exc)
            return SubmissionResult(success=True, error=exc, duration_ms=duration_ms)

        return SubmissionResult(success=True, duration_ms=duration_ms)

    async def _post_and_reload(self, outcome: PaymentOutcome, method_id: str) -> None:
        await self._store.dispatch(
            actions.widget_interaction(ActionType.WIDGET_INTERACTION_STARTED, method_id)
        )
        await self._request_sender.post(
            self.config.checkout_path,
            headers=FORM_HEADERS,
            body=self.build_form(outcome),
        )
        await asyncio.gather(
            self._store.dispatch(actions.load_current_checkout()),
            self._store.dispatch(actions.load_payment_method(method_id)),
        )
        await self._store.dispatch(
            actions.widget_interaction(ActionType.WIDGET_INTERACTION_FINISHED, method_id)
        )

    async def _failed(
        self,
        method_id: str,
        options: "WalletPayOptions",
        error: Exception,
        start: float,
    ) -> SubmissionResult:
        duration_ms = (time.perf_counter() - start) * 1000
        await self._report_failure(method_id, error)
        self._notify_error(options, error)
        return SubmissionResult(success=False, error=error, duration_ms=duration_ms)

    async def _report_failure(self, method_id: str, error: BaseException) -> None:
        if self._metrics:
            self._metrics.submissions.labels(method_id=method_id, outcome="failed").inc()
        self._log_event(
            "submission_failed",
            method_id=method_id,
            error_type=type(error).__name__,
            error=str(error),
        )
        try:
            await self._store.dispatch(
                actions.widget_interaction(ActionType.WIDGET_INTERACTION_FAILED, method_id, error=error)
            )
        except Exception as exc:
            self._log_event("submission_failed_dispatch_error", method_id=method_id, error=str(exc))

    def _notify_error(self, options: "WalletPayOptions", error: BaseException) -> None:
        try:
            options.on_error(error)
        except Exception as exc:
            self._log_event("error_callback_error", error=str(exc))
