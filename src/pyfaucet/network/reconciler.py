"""
NetworkReconciler - keeps the wallet's active chain in line with the target.

The active chain id is only ever learned from the provider (``eth_chainId``
or a ``chainChanged`` event). A successful switch request is never taken as
proof that the wallet moved: the request and its notification can arrive in
either order, and no notification fires at all when the wallet was already on
the target. After every switch attempt the chain id is read again.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Optional

from pyfaucet.core.chains import NetworkDescriptor, normalize_chain_id
from pyfaucet.core.constants import (
    CODE_UNRECOGNIZED_CHAIN,
    EVENT_CHAIN_CHANGED,
    METHOD_ADD_CHAIN,
    METHOD_CHAIN_ID,
    METHOD_SWITCH_CHAIN,
)
from pyfaucet.core.errors import ProviderRequestError
from pyfaucet.core.types import ProviderSession
from pyfaucet.provider.base import ProviderAdapter

log = logging.getLogger(__name__)


class NetworkState(str, Enum):
    UNKNOWN = "unknown"
    MISMATCHED = "mismatched"
    MATCHED = "matched"


class NetworkReconciler:
    def __init__(
        self,
        provider: ProviderAdapter,
        target: NetworkDescriptor,
        session: Optional[ProviderSession] = None,
        on_change: Optional[Callable[[], None]] = None,
    ) -> None:
        self._provider = provider
        self._target = target
        self._session = session if session is not None else ProviderSession()
        self._on_change = on_change
        self._state = NetworkState.UNKNOWN
        self._pending_switches = 0
        self._switch_attempted = False
        self._chain_events = 0
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def target(self) -> NetworkDescriptor:
        return self._target

    @property
    def session(self) -> ProviderSession:
        return self._session

    @property
    def active_chain_id(self) -> Optional[str]:
        return self._session.active_chain_id

    @property
    def state(self) -> NetworkState:
        return self._state

    @property
    def is_matched(self) -> bool:
        return self._state is NetworkState.MATCHED

    @property
    def switching(self) -> bool:
        return self._pending_switches > 0

    @property
    def switch_attempted(self) -> bool:
        return self._switch_attempted

    def attach(self) -> None:
        if self._unsubscribe is None:
            self._unsubscribe = self._provider.subscribe(EVENT_CHAIN_CHANGED, self.observe_chain)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    async def refresh(self) -> NetworkState:
        """
        Read the active chain from the provider and recompute the state.

        A ``chainChanged`` event delivered while the read is in flight is
        newer than the read, so the read is dropped in that case.
        """
        events_before = self._chain_events
        chain_id = await self._provider.request(METHOD_CHAIN_ID)
        if self._chain_events != events_before:
            log.debug("Dropping eth_chainId result %r, chain changed during the read", chain_id)
            return self._state
        canonical = _parse_chain_id(chain_id)
        if canonical is not None:
            self._store(canonical)
        return self._state

    def observe_chain(self, chain_id: Any) -> None:
        canonical = _parse_chain_id(chain_id)
        if canonical is None:
            return
        self._chain_events += 1
        self._store(canonical)

    def _store(self, canonical: str) -> None:
        if canonical != self._session.active_chain_id:
            log.info("Active chain is now %s", canonical)
        self._session.active_chain_id = canonical
        self._recompute()

    def _recompute(self) -> None:
        active = self._session.active_chain_id
        if active is None:
            state = NetworkState.UNKNOWN
        elif active == self._target.chain_id:
            state = NetworkState.MATCHED
        else:
            state = NetworkState.MISMATCHED
        self._state = state
        self._notify()

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change()

    async def ensure_target_network(self) -> NetworkState:
        """
        Ask the wallet to switch to the target chain, adding it when unknown.

        Errors other than "unrecognized chain" propagate unchanged, as does
        any failure of the add-chain request. Calls may overlap; ``switching``
        stays true until the last of them finishes.

        Returns:
            The state after re-reading the active chain
        """
        self._pending_switches += 1
        self._switch_attempted = False
        self._notify()
        try:
            try:
                await self._provider.request(METHOD_SWITCH_CHAIN, [{"chainId": self._target.chain_id}])
            except ProviderRequestError as exc:
                if exc.code != CODE_UNRECOGNIZED_CHAIN:
                    raise
                log.info("Wallet does not know %s, adding it", self._target.name)
                await self._provider.request(METHOD_ADD_CHAIN, [self._target.to_add_chain_params()])
            self._switch_attempted = True
            return await self.refresh()
        finally:
            self._pending_switches -= 1
            self._notify()


def _parse_chain_id(chain_id: Any) -> Optional[str]:
    try:
        return normalize_chain_id(chain_id)
    except ValueError:
        log.warning("Ignoring unparseable chain id %r", chain_id)
        return None
