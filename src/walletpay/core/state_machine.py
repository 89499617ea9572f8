"""
Wallet State Machine - explicit lifecycle for one wallet payment method.

Provides:
- Explicit states from UNINITIALIZED through SUBMITTING_FORM
- Valid state transitions with guards
- Audit trail of state changes
- Blocks (and counts) invalid transitions instead of raising
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable, Dict, List, Optional

from walletpay.infra import logging_cfg

log = logging.getLogger("walletpay")


class WalletState(Enum):
    """
    Wallet lifecycle states.

    State Diagram:

    UNINITIALIZED ──> CONFIGURING ──> READY ──> CHECKING_READINESS
                          │            ▲              │
                          │            │              ▼
                          │            ├──── LOADING_PAYMENT_DATA
                          │            │              │
                          │            │              ▼
                          │            ├────── PARSING_RESPONSE
                          │            │              │
                          │            │              ▼
                          │            └─────── SUBMITTING_FORM
                          ▼
                        ERROR  <── (any in-flight state)
    """
    UNINITIALIZED = auto()         # No configuration cycle has run
    CONFIGURING = auto()           # Loading config, SDK and request descriptor
    READY = auto()                 # Session available, waiting for the trigger
    CHECKING_READINESS = auto()    # Asking the wallet whether it can pay
    LOADING_PAYMENT_DATA = auto()  # Wallet sheet open, waiting for the user
    PARSING_RESPONSE = auto()      # Turning raw payment data into a tokenize payload
    SUBMITTING_FORM = auto()       # Posting the payload to the checkout backend
    ERROR = auto()                 # Last configuration or interaction failed


@dataclass
class StateTransition:
    """Record of a state transition."""
    from_state: WalletState
    to_state: WalletState
    timestamp_ms: int
    reason: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


IN_FLIGHT_STATES = frozenset({
    WalletState.CONFIGURING,
    WalletState.CHECKING_READINESS,
    WalletState.LOADING_PAYMENT_DATA,
    WalletState.PARSING_RESPONSE,
    WalletState.SUBMITTING_FORM,
})


# Every state may return to UNINITIALIZED on deinitialize.
VALID_TRANSITIONS: Dict[WalletState, List[WalletState]] = {
    WalletState.UNINITIALIZED: [
        WalletState.CONFIGURING,
    ],
    WalletState.CONFIGURING: [
        WalletState.READY,
        WalletState.ERROR,
        WalletState.UNINITIALIZED,
    ],
    WalletState.READY: [
        WalletState.CHECKING_READINESS,
        WalletState.CONFIGURING,        # Re-initialize
        WalletState.UNINITIALIZED,
    ],
    WalletState.CHECKING_READINESS: [
        WalletState.LOADING_PAYMENT_DATA,
        WalletState.READY,              # Wallet not ready, nothing to do
        WalletState.ERROR,
        WalletState.UNINITIALIZED,
    ],
    WalletState.LOADING_PAYMENT_DATA: [
        WalletState.PARSING_RESPONSE,
        WalletState.ERROR,
        WalletState.UNINITIALIZED,
    ],
    WalletState.PARSING_RESPONSE: [
        WalletState.SUBMITTING_FORM,
        WalletState.ERROR,
        WalletState.UNINITIALIZED,
    ],
    WalletState.SUBMITTING_FORM: [
        WalletState.READY,              # Submission resolved, success or not
        WalletState.ERROR,
        WalletState.UNINITIALIZED,
    ],
    WalletState.ERROR: [
        WalletState.CHECKING_READINESS,  # User re-activates the trigger
        WalletState.CONFIGURING,
        WalletState.UNINITIALIZED,
    ],
}


class WalletStateMachine:
    """
    Tracks the wallet lifecycle with validated transitions.

    Single-threaded asyncio use only; transitions happen between suspension
    points so no locking is needed here.
    """

    def __init__(
        self,
        method_id: str = "",
        log_event: Optional[Callable[..., None]] = None,
        on_state_change: Optional[Callable[[WalletState, WalletState], None]] = None,
    ) -> None:
        self.method_id = method_id
        self._log_event = log_event or self._default_log
        self._on_state_change = on_state_change

        self._state = WalletState.UNINITIALIZED
        self._transitions: List[StateTransition] = []

        self._stats = {
            "transitions": 0,
            "errors": 0,
            "invalid_transitions_blocked": 0,
        }

    def _default_log(self, event: str, **kwargs: Any) -> None:
        logging_cfg.log_event(log, event, **{"method_id": self.method_id, **kwargs})

    @property
    def state(self) -> WalletState:
        return self._state

    @property
    def transitions(self) -> List[StateTransition]:
        return list(self._transitions)

    @property
    def is_in_flight(self) -> bool:
        return self._state in IN_FLIGHT_STATES

    def can_transition(self, to_state: WalletState) -> bool:
        return to_state in VALID_TRANSITIONS.get(self._state, [])

    def transition(
        self,
        to_state: WalletState,
        reason: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """
        Attempt to move to to_state.

        Returns:
            True if the transition happened, False if it was blocked
        """
        from_state = self._state

        if not self.can_transition(to_state):
            self._stats["invalid_transitions_blocked"] += 1
            self._log_event(
                "wallet_state_invalid_transition",
                from_state=from_state.name,
                to_state=to_state.name,
                reason=reason,
            )
            return False

        self._transitions.append(
            StateTransition(
                from_state=from_state,
                to_state=to_state,
                timestamp_ms=int(time.time() * 1000),
                reason=reason,
                metadata=metadata or {},
            )
        )
        self._state = to_state
        self._stats["transitions"] += 1
        if to_state == WalletState.ERROR:
            self._stats["errors"] += 1

        # Step transitions are routine; keep them at DEBUG
        if to_state in (WalletState.ERROR, WalletState.READY, WalletState.UNINITIALIZED):
            self._log_event(
                "wallet_state_transition",
                from_state=from_state.name,
                to_state=to_state.name,
                reason=reason,
            )
        else:
            log.debug("wallet_state %s -> %s (%s)", from_state.name, to_state.name, reason)

        if self._on_state_change:
            try:
                self._on_state_change(from_state, to_state)
            except Exception as e:
                self._log_event("wallet_state_callback_error", error=str(e))

        return True

    def fail(self, reason: str, **metadata: Any) -> bool:
        """Move to ERROR from an in-flight state."""
        return self.transition(WalletState.ERROR, reason=reason, metadata=metadata)

    def reset(self, reason: str = "deinitialize") -> bool:
        """Return to UNINITIALIZED. No-op when already there."""
        if self._state == WalletState.UNINITIALIZED:
            return True
        return self.transition(WalletState.UNINITIALIZED, reason=reason)

    def get_stats(self) -> Dict[str, Any]:
        return {
            **self._stats,
            "state": self._state.name,
        }
