"""
Named single-slot locks guarding wallet submissions.

A lock is identified by queue id and payment method, e.g.
``widgetInteraction:walletpay``. Callers that find the slot taken queue
behind the holder; nothing is ever dropped.
"""

from __future__ import annotations

import asyncio
import logging
import weakref
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Callable, Dict, Optional

from walletpay.infra import logging_cfg

log = logging.getLogger("walletpay")


def interaction_key(queue_id: str, method_id: str) -> str:
    return f"{queue_id}:{method_id}"


@dataclass
class _LoopLocks:
    locks: Dict[str, asyncio.Lock] = field(default_factory=dict)
    waiting: Dict[str, int] = field(default_factory=dict)


class InteractionLockRegistry:
    """
    Registry of named asyncio locks.

    asyncio.Lock wakes waiters in FIFO order, so queued interactions run in
    the order they were activated.

    An asyncio.Lock belongs to the loop that first waits on it, so each
    running loop gets its own lock table. A registry shared across several
    ``asyncio.run`` calls starts fresh in every loop.
    """

    def __init__(self, log_event: Optional[Callable[..., None]] = None) -> None:
        self._loops: weakref.WeakKeyDictionary = weakref.WeakKeyDictionary()
        self._log_event = log_event or self._default_log

    def _default_log(self, event: str, **kwargs: Any) -> None:
        logging_cfg.log_event(log, event, **kwargs)

    def _current(self, create: bool = False) -> Optional[_LoopLocks]:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return None
        table = self._loops.get(loop)
        if table is None and create:
            table = _LoopLocks()
            self._loops[loop] = table
        return table

    def _lock(self, name: str) -> asyncio.Lock:
        table = self._current(create=True)
        lock = table.locks.get(name)
        if lock is None:
            lock = asyncio.Lock()
            table.locks[name] = lock
        return lock

    def is_locked(self, name: str) -> bool:
        table = self._current()
        if table is None:
            return False
        lock = table.locks.get(name)
        return lock is not None and lock.locked()

    def waiting(self, name: str) -> int:
        """Number of callers queued behind the current holder."""
        table = self._current()
        return 0 if table is None else table.waiting.get(name, 0)

    @asynccontextmanager
    async def hold(self, name: str) -> AsyncIterator[None]:
        lock = self._lock(name)
        waiting = self._current().waiting
        if lock.locked():
            waiting[name] = waiting.get(name, 0) + 1
            self._log_event("interaction_queued", lock=name, waiting=waiting[name])
            try:
                await lock.acquire()
            finally:
                waiting[name] -= 1
        else:
            await lock.acquire()
        try:
            yield
        finally:
            lock.release()


# Shared by every controller in the process unless one is injected.
default_registry = InteractionLockRegistry()
