"""
Trigger element abstraction.

The host resolves whatever it renders the wallet button into (a DOM bridge,
a widget, a bot keyboard) and wraps it in something with add/remove listener
semantics. WalletTrigger is the in-process implementation used by hosts that
drive activation themselves and by the tests.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from walletpay.infra import logging_cfg

log = logging.getLogger("walletpay")


@dataclass
class ActivationEvent:
    """Activation of a trigger. prevent_default marks the default action as handled."""
    source: Optional[str] = None
    default_prevented: bool = False

    def prevent_default(self) -> None:
        self.default_prevented = True


Listener = Callable[[ActivationEvent], None]


class WalletTrigger:
    """
    Minimal listener registry for one trigger element.

    Listeners are compared by identity, so removing a handler only works
    with the same callable object that was added.
    """

    def __init__(self, name: str = "wallet-trigger", log_event: Optional[Callable[..., None]] = None) -> None:
        self.name = name
        self._listeners: List[Listener] = []
        self._log_event = log_event or self._default_log
        self._stats = {"activations": 0}

    def _default_log(self, event: str, **kwargs: Any) -> None:
        logging_cfg.log_event(log, event, logging.DEBUG, **{"trigger": self.name, **kwargs})

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def add_listener(self, handler: Listener) -> None:
        if any(existing is handler for existing in self._listeners):
            return
        self._listeners.append(handler)
        self._log_event("trigger_listener_added", total=len(self._listeners))

    def remove_listener(self, handler: Listener) -> None:
        self._listeners = [existing for existing in self._listeners if existing is not handler]
        self._log_event("trigger_listener_removed", total=len(self._listeners))

    def activate(self, event: Optional[ActivationEvent] = None) -> ActivationEvent:
        """
        Deliver an activation to every listener.

        Listener exceptions propagate to the caller.
        """
        event = event or ActivationEvent(source=self.name)
        self._stats["activations"] += 1
        for handler in list(self._listeners):
            handler(event)
        return event

    def get_stats(self) -> Dict[str, Any]:
        return {**self._stats, "listeners": len(self._listeners)}
