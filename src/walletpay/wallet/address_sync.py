"""
AddressSynchronizer: pushes wallet addresses into the checkout store.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, TYPE_CHECKING

from walletpay import actions
from walletpay.address_mapping import map_wallet_address
from walletpay.errors import NotConfiguredError
from walletpay.infra import logging_cfg
from walletpay.models import CheckoutState, WalletAddress

if TYPE_CHECKING:
    from walletpay.interfaces import AddressMapper, CheckoutStore

log = logging.getLogger("walletpay")


class AddressSynchronizer:
    """
    Maps wallet addresses to checkout requests and dispatches them.

    method_id_getter is read on every call so the synchronizer follows the
    controller's current payment method.
    """

    def __init__(
        self,
        store: "CheckoutStore",
        method_id_getter: Callable[[], Optional[str]],
        address_mapper: Optional["AddressMapper"] = None,
        log_event: Optional[Callable[..., None]] = None,
    ) -> None:
        self._store = store
        self._method_id_getter = method_id_getter
        self._map_address = address_mapper or map_wallet_address
        self._log_event = log_event or self._default_log

    def _default_log(self, event: str, **kwargs: Any) -> None:
        logging_cfg.log_event(log, event, **kwargs)

    def _require_method_id(self) -> str:
        method_id = self._method_id_getter()
        if not method_id:
            raise NotConfiguredError()
        return method_id

    async def update_shipping_address(self, address: Optional[WalletAddress]) -> Optional[CheckoutState]:
        method_id = self._require_method_id()
        if address is None:
            return None

        await self._store.dispatch(actions.update_shipping_address(self._map_address(address)))
        self._log_event("shipping_address_synced", method_id=method_id, country_code=address.country_code)
        return self._store.get_state()

    async def update_billing_address(self, address: Optional[WalletAddress]) -> Optional[CheckoutState]:
        """
        Update the existing remote billing address, or create one.

        The payment method is reloaded first so the remote billing address
        id reflects what the backend currently holds.
        """
        method_id = self._require_method_id()
        if address is None:
            return None

        state = await self._store.dispatch(actions.load_payment_method(method_id))
        remote_billing_address = state.get_billing_address()

        if remote_billing_address is None:
            request = self._map_address(address)
        else:
            request = self._map_address(address, remote_billing_address.id)

        state = await self._store.dispatch(actions.update_billing_address(request))
        self._log_event(
            "billing_address_synced",
            method_id=method_id,
            mode="update" if request.id else "create",
        )
        return state
