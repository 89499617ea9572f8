"""
Factory for creating fully-wired WalletInteractionController instances.

Hosts that only have the store, the script loader and the capability
provider get the HTTP sender, metrics and logger built from Settings.

Usage:
    from walletpay.factory import ControllerDependencies, create_controller

    deps = ControllerDependencies(
        store=store,
        script_loader=loader,
        capability_provider=provider,
    )
    controller = create_controller(deps)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

from walletpay.config.settings import Settings
from walletpay.core.interaction_lock import InteractionLockRegistry
from walletpay.infra.logging_cfg import build_logger
from walletpay.infra.request_sender import HttpRequestSender
from walletpay.monitoring.metrics import WalletMetrics
from walletpay.wallet.controller import WalletInteractionController

if TYPE_CHECKING:
    from walletpay.interfaces import (
        AddressMapper,
        CheckoutStore,
        RequestSender,
        ScriptLoader,
        WalletCapabilityProvider,
    )

log = logging.getLogger("walletpay")


@dataclass
class ControllerDependencies:
    """Everything needed to create a WalletInteractionController."""
    store: "CheckoutStore"
    script_loader: "ScriptLoader"
    capability_provider: "WalletCapabilityProvider"
    settings: Optional[Settings] = None

    # Optional overrides for testing
    request_sender: Optional["RequestSender"] = None
    address_mapper: Optional["AddressMapper"] = None
    metrics: Optional[WalletMetrics] = None
    locks: Optional[InteractionLockRegistry] = None


def create_controller(deps: ControllerDependencies) -> WalletInteractionController:
    """
    Create a controller with logger, HTTP sender and metrics wired from settings.

    Settings are loaded from the environment when not given. Metrics are
    only created when enabled and not overridden.
    """
    settings = deps.settings or Settings.load()
    build_logger("walletpay", level=settings.log_level, file_path=settings.log_file)

    request_sender = deps.request_sender or HttpRequestSender(
        settings.base_url,
        timeout=settings.http_timeout,
    )
    metrics = deps.metrics
    if metrics is None and settings.metrics_enabled:
        metrics = WalletMetrics()

    controller = WalletInteractionController(
        store=deps.store,
        script_loader=deps.script_loader,
        capability_provider=deps.capability_provider,
        request_sender=request_sender,
        address_mapper=deps.address_mapper,
        settings=settings,
        locks=deps.locks,
        metrics=metrics,
    )
    log.debug("controller created base_url=%s metrics=%s", settings.base_url, metrics is not None)
    return controller
