from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from pyfaucet.claim import ClaimTransaction, ClaimWorkflow, FaucetContract
from pyfaucet.core.chains import CORE_TESTNET2, NetworkDescriptor, as_network
from pyfaucet.core.constants import FAUCET_ADDRESS, FAUCET_FUNCTION, RECEIPT_POLL_INTERVAL
from pyfaucet.core.errors import FaucetError, NoProviderError
from pyfaucet.network import NetworkReconciler
from pyfaucet.provider import EIP1193Provider, LocalWalletProvider, ProviderAdapter
from pyfaucet.session import SessionState
from pyfaucet.view import FaucetView, project

log = logging.getLogger(__name__)

ViewListener = Callable[[FaucetView], None]


@dataclass
class ActionResult:
    ok: bool
    message: str = ""
    error: Optional[FaucetError] = None


class AsyncFaucet:
    """
    Async faucet client: connect a wallet, keep it on the faucet network, claim.

    Each user action (``connect``, ``switch_network``, ``claim``) catches
    every ``FaucetError`` and reports it through its ActionResult and the
    projected view; nothing escapes to the caller.

    Example:
        async with await AsyncFaucet.create(private_key=key) as faucet:
            await faucet.connect()
            result = await faucet.claim()
            print(faucet.view().tx_url)
    """

    def __init__(
        self,
        provider: Optional[EIP1193Provider],
        network: NetworkDescriptor | str | int = CORE_TESTNET2,
        contract_address: str = FAUCET_ADDRESS,
        function_signature: str = FAUCET_FUNCTION,
        poll_interval: float = RECEIPT_POLL_INTERVAL,
        confirmation_timeout: Optional[float] = None,
    ) -> None:
        self._target = as_network(network)
        self._provider = ProviderAdapter(provider)
        self._listeners: List[ViewListener] = []
        self._notice: Optional[str] = None
        self._session = SessionState(self._provider, self._target, on_change=self._notify)
        self._contract = FaucetContract(
            self._provider,
            contract_address,
            function_signature=function_signature,
            poll_interval=poll_interval,
            timeout=confirmation_timeout,
        )
        self._claims = ClaimWorkflow(self._session, self._contract, on_change=self._notify)

    @classmethod
    async def create(
        cls,
        private_key: str,
        network: NetworkDescriptor | str | int = CORE_TESTNET2,
        wallet_rpc_url: Optional[str] = None,
        contract_address: str = FAUCET_ADDRESS,
        poll_interval: float = RECEIPT_POLL_INTERVAL,
        confirmation_timeout: Optional[float] = None,
    ) -> "AsyncFaucet":
        """
        Create a faucet client backed by a headless wallet.

        Args:
            private_key: Key the wallet signs with
            network: Target network (descriptor, chain id or name)
            wallet_rpc_url: RPC the wallet starts on; defaults to the target's
            contract_address: Faucet contract address
            poll_interval: Seconds between receipt lookups
            confirmation_timeout: Seconds to wait for mining, None for no limit

        Returns:
            A started AsyncFaucet
        """
        target = as_network(network)
        if wallet_rpc_url is None:
            wallet = LocalWalletProvider(private_key, target)
        else:
            wallet = await LocalWalletProvider.from_rpc_url(private_key, wallet_rpc_url, known_networks=[target])
        faucet = cls(
            wallet,
            network=target,
            contract_address=contract_address,
            poll_interval=poll_interval,
            confirmation_timeout=confirmation_timeout,
        )
        await faucet.start()
        return faucet

    @property
    def target(self) -> NetworkDescriptor:
        return self._target

    @property
    def provider(self) -> ProviderAdapter:
        return self._provider

    @property
    def session(self) -> SessionState:
        return self._session

    @property
    def network(self) -> NetworkReconciler:
        return self._session.network

    @property
    def claims(self) -> ClaimWorkflow:
        return self._claims

    @property
    def contract(self) -> FaucetContract:
        return self._contract

    @property
    def notice(self) -> Optional[str]:
        return self._notice

    async def start(self) -> None:
        await self._session.start()
        if not self._provider.is_available:
            self._notice = NoProviderError().user_message
        self._notify()

    async def close(self) -> None:
        self._session.close()
        self._provider.close()

    async def __aenter__(self) -> "AsyncFaucet":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def add_listener(self, listener: ViewListener) -> Callable[[], None]:
        """Call ``listener`` with a fresh view after every state change."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def view(self) -> FaucetView:
        return project(
            self._session.session,
            self._session.is_ready_to_claim(),
            self._claims.current,
            self.network.switching,
            target=self._target,
            notice=self._notice,
        )

    def _notify(self) -> None:
        if not self._listeners:
            return
        current = self.view()
        for listener in list(self._listeners):
            listener(current)

    # ── User actions ───────────────────────────────────────

    async def connect(self) -> ActionResult:
        self._notice = None
        try:
            account = await self._session.connect()
        except FaucetError as exc:
            return self._failed("connect", exc)
        log.info("Connected %s on %s", account, self.network.active_chain_id)
        return ActionResult(ok=True, message=f"Connected: {account}")

    async def switch_network(self) -> ActionResult:
        self._notice = None
        if not self._provider.is_available:
            return self._failed("switch_network", NoProviderError(operation="switch_network"))
        try:
            await self.network.ensure_target_network()
        except FaucetError as exc:
            return self._failed("switch_network", exc)
        if not self.network.is_matched:
            return ActionResult(ok=False, message=f"Waiting for the wallet to switch to {self._target.name}.")
        return ActionResult(ok=True, message=f"Switched to {self._target.name}")

    async def claim(self) -> ActionResult:
        self._notice = None
        try:
            tx = await self._claims.submit_claim()
        except FaucetError as exc:
            return ActionResult(ok=False, message=exc.user_message, error=exc)
        return ActionResult(ok=True, message=_claim_message(tx))

    def _failed(self, action: str, exc: FaucetError) -> ActionResult:
        log.warning("%s failed: %s", action, exc)
        self._notice = exc.user_message
        self._notify()
        return ActionResult(ok=False, message=exc.user_message, error=exc)


def _claim_message(tx: ClaimTransaction) -> str:
    return f"Tokens have been sent to your wallet (tx {tx.hash})"
