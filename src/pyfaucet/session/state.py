from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional, Sequence

from pyfaucet.core.chains import NetworkDescriptor
from pyfaucet.core.constants import EVENT_ACCOUNTS_CHANGED, METHOD_REQUEST_ACCOUNTS
from pyfaucet.core.errors import FaucetError, NoProviderError, ProviderRequestError
from pyfaucet.core.types import ProviderSession
from pyfaucet.network.reconciler import NetworkReconciler
from pyfaucet.provider.base import ProviderAdapter

log = logging.getLogger(__name__)


class SessionState:
    """
    Connected account plus the network it is pointed at.

    ``account`` is written here only; ``active_chain_id`` only by the
    reconciler, which shares the same ``ProviderSession``.
    """

    def __init__(
        self,
        provider: ProviderAdapter,
        target: NetworkDescriptor,
        on_change: Optional[Callable[[], None]] = None,
    ) -> None:
        self._provider = provider
        self._session = ProviderSession()
        self._on_change = on_change
        self._network = NetworkReconciler(provider, target, self._session, on_change=on_change)
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def provider(self) -> ProviderAdapter:
        return self._provider

    @property
    def network(self) -> NetworkReconciler:
        return self._network

    @property
    def session(self) -> ProviderSession:
        return self._session

    @property
    def account(self) -> Optional[str]:
        return self._session.account

    async def start(self) -> None:
        """Subscribe to wallet events and read the initial chain."""
        if not self._provider.is_available:
            log.warning("No wallet provider available")
            return
        if self._unsubscribe is None:
            self._unsubscribe = self._provider.subscribe(EVENT_ACCOUNTS_CHANGED, self.on_accounts_changed)
        self._network.attach()
        try:
            await self._network.refresh()
        except FaucetError as exc:
            log.warning("Could not read initial chain id: %s", exc)

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._network.detach()

    async def connect(self) -> str:
        """
        Put the wallet on the target network, then request account access.

        Returns:
            The connected address

        Raises:
            NoProviderError: If no wallet provider is injected
            ProviderRequestError: If the wallet refuses the switch, the add or the access request
        """
        if not self._provider.is_available:
            raise NoProviderError(operation="connect")
        await self._network.ensure_target_network()
        accounts = await self._provider.request(METHOD_REQUEST_ACCOUNTS)
        addresses = _as_addresses(accounts)
        if not addresses:
            raise ProviderRequestError(
                message="Wallet returned no accounts",
                operation=METHOD_REQUEST_ACCOUNTS,
            )
        self._set_account(addresses[0])
        return addresses[0]

    def is_ready_to_claim(self) -> bool:
        return self._session.account is not None and self._network.is_matched

    def on_accounts_changed(self, accounts: Any) -> None:
        addresses = _as_addresses(accounts)
        self._set_account(addresses[0] if addresses else None)

    def _set_account(self, account: Optional[str]) -> None:
        if account != self._session.account:
            if account is None:
                log.info("Wallet disconnected")
            else:
                log.info("Connected account: %s", account)
        self._session.account = account
        if self._on_change is not None:
            self._on_change()


def _as_addresses(accounts: Any) -> List[str]:
    if not accounts:
        return []
    if isinstance(accounts, str):
        return [accounts]
    if isinstance(accounts, Sequence):
        return [str(a) for a in accounts]
    return []
