"""
LocalWalletProvider - a headless EIP-1193 wallet.

Signs with a local private key and talks to JSON-RPC endpoints through
``AsyncWeb3``. It keeps its own registry of known networks so the
switch/add-network protocol behaves the way browser wallets do: switching to
an unknown chain fails with code 4902 until the chain is added.

Example:
    wallet = LocalWalletProvider(private_key, CORE_TESTNET2)
    faucet = AsyncFaucet(wallet)
"""
from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Mapping, Optional

from eth_account import Account
from web3 import AsyncHTTPProvider, AsyncWeb3, Web3
from web3.exceptions import TransactionNotFound

from pyfaucet.core.chains import NativeCurrency, NetworkDescriptor, normalize_chain_id
from pyfaucet.core.constants import (
    CODE_INVALID_PARAMS,
    CODE_UNAUTHORIZED,
    CODE_UNRECOGNIZED_CHAIN,
    ERROR_CODES,
    EVENT_ACCOUNTS_CHANGED,
    EVENT_CHAIN_CHANGED,
    METHOD_ACCOUNTS,
    METHOD_ADD_CHAIN,
    METHOD_CHAIN_ID,
    METHOD_GET_RECEIPT,
    METHOD_REQUEST_ACCOUNTS,
    METHOD_SEND_TRANSACTION,
    METHOD_SWITCH_CHAIN,
)
from pyfaucet.core.errors import ProviderRequestError
from pyfaucet.core.utils import to_int

log = logging.getLogger(__name__)

Web3Factory = Callable[[NetworkDescriptor], AsyncWeb3]
EventCallback = Callable[[Any], None]

_QUANTITY_FIELDS = ("value", "gas", "gasPrice", "maxFeePerGas", "maxPriorityFeePerGas", "nonce")


def _default_web3(network: NetworkDescriptor) -> AsyncWeb3:
    return AsyncWeb3(AsyncHTTPProvider(network.rpc_url))


def _first_param(method: str, params: Any) -> Any:
    if isinstance(params, (list, tuple)) and params:
        return params[0]
    if isinstance(params, Mapping) or isinstance(params, str):
        return params
    raise ProviderRequestError(
        message=f"Missing parameters for {method}",
        operation=method,
        code=CODE_INVALID_PARAMS,
    )


class LocalWalletProvider:
    def __init__(
        self,
        private_key: str,
        network: NetworkDescriptor,
        known_networks: Iterable[NetworkDescriptor] = (),
        web3_factory: Optional[Web3Factory] = None,
    ) -> None:
        self._account = Account.from_key(private_key)
        self._factory = web3_factory or _default_web3
        self._networks: Dict[str, NetworkDescriptor] = {network.chain_id: network}
        for known in known_networks:
            self._networks.setdefault(known.chain_id, known)
        self._network = network
        self._web3 = self._factory(network)
        self._connected = False
        self._listeners: Dict[str, List[EventCallback]] = {}
        self._handlers: Dict[str, Callable[[Any], Awaitable[Any]]] = {
            METHOD_CHAIN_ID: self._chain_id,
            METHOD_ACCOUNTS: self._accounts,
            METHOD_REQUEST_ACCOUNTS: self._request_accounts,
            METHOD_SWITCH_CHAIN: self._switch_chain,
            METHOD_ADD_CHAIN: self._add_chain,
            METHOD_SEND_TRANSACTION: self._send_transaction,
            METHOD_GET_RECEIPT: self._get_receipt,
        }

    @classmethod
    async def from_rpc_url(
        cls,
        private_key: str,
        rpc_url: str,
        known_networks: Iterable[NetworkDescriptor] = (),
        web3_factory: Optional[Web3Factory] = None,
    ) -> "LocalWalletProvider":
        """Start the wallet on whatever chain the RPC endpoint serves."""
        factory = web3_factory or _default_web3
        endpoint = NetworkDescriptor(
            chain_id=1,
            name="RPC endpoint",
            rpc_urls=(rpc_url,),
            currency=NativeCurrency(name="Ether", symbol="ETH"),
        )
        chain_id = normalize_chain_id(await factory(endpoint).eth.chain_id)
        known = {n.chain_id: n for n in known_networks}
        network = known.get(chain_id) or NetworkDescriptor(
            chain_id=chain_id,
            name=f"Network {int(chain_id, 16)}",
            rpc_urls=(rpc_url,),
            currency=NativeCurrency(name="Ether", symbol="ETH"),
        )
        return cls(private_key, network, known_networks=known.values(), web3_factory=factory)

    @property
    def address(self) -> str:
        return self._account.address

    @property
    def network(self) -> NetworkDescriptor:
        return self._network

    @property
    def chain_id(self) -> str:
        return self._network.chain_id

    @property
    def is_connected(self) -> bool:
        return self._connected

    @property
    def web3(self) -> AsyncWeb3:
        return self._web3

    # ── Events ─────────────────────────────────────────────

    def on(self, event: str, callback: EventCallback) -> None:
        self._listeners.setdefault(event, []).append(callback)

    def remove_listener(self, event: str, callback: EventCallback) -> None:
        listeners = self._listeners.get(event, [])
        if callback in listeners:
            listeners.remove(callback)

    def _emit(self, event: str, payload: Any) -> None:
        for callback in list(self._listeners.get(event, [])):
            callback(payload)

    def disconnect(self) -> None:
        """Revoke the page's access to the account, like disconnecting a site in a wallet."""
        if self._connected:
            self._connected = False
            log.info("Wallet disconnected")
            self._emit(EVENT_ACCOUNTS_CHANGED, [])

    # ── Requests ───────────────────────────────────────────

    async def request(self, method: str, params: Any = None) -> Any:
        handler = self._handlers.get(method)
        if handler is None:
            return await self._forward(method, params)
        return await handler(params)

    async def _chain_id(self, params: Any) -> str:
        return self._network.chain_id

    async def _accounts(self, params: Any) -> List[str]:
        return [self.address] if self._connected else []

    async def _request_accounts(self, params: Any) -> List[str]:
        if not self._connected:
            self._connected = True
            log.info("Wallet connected as %s", self.address)
            self._emit(EVENT_ACCOUNTS_CHANGED, [self.address])
        return [self.address]

    async def _switch_chain(self, params: Any) -> None:
        raw = _first_param(METHOD_SWITCH_CHAIN, params)
        try:
            chain_id = normalize_chain_id(raw["chainId"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ProviderRequestError(
                message=f"Invalid chainId: {exc}",
                operation=METHOD_SWITCH_CHAIN,
                code=CODE_INVALID_PARAMS,
            ) from exc
        if chain_id == self._network.chain_id:
            return None
        network = self._networks.get(chain_id)
        if network is None:
            raise ProviderRequestError(
                message=f'Unrecognized chain ID "{chain_id}". Try adding the chain using {METHOD_ADD_CHAIN} first.',
                operation=METHOD_SWITCH_CHAIN,
                code=CODE_UNRECOGNIZED_CHAIN,
            )
        self._activate(network)
        return None

    async def _add_chain(self, params: Any) -> None:
        raw = _first_param(METHOD_ADD_CHAIN, params)
        try:
            network = NetworkDescriptor.from_add_chain_params(raw)
        except ValueError as exc:
            raise ProviderRequestError(
                message=str(exc),
                operation=METHOD_ADD_CHAIN,
                code=CODE_INVALID_PARAMS,
            ) from exc

        web3 = self._factory(network)
        try:
            reported = normalize_chain_id(await web3.eth.chain_id)
        except Exception as exc:
            raise ProviderRequestError(
                message=f"Could not fetch chain ID from {network.rpc_url}: {exc}",
                operation=METHOD_ADD_CHAIN,
                code=ERROR_CODES["INTERNAL_ERROR"],
            ) from exc
        if reported != network.chain_id:
            raise ProviderRequestError(
                message=(
                    f"Chain ID returned by RPC URL {network.rpc_url} ({reported}) "
                    f"does not match {network.chain_id}"
                ),
                operation=METHOD_ADD_CHAIN,
                code=CODE_INVALID_PARAMS,
            )

        self._networks[network.chain_id] = network
        log.info("Added network %s (%s)", network.name, network.chain_id)
        if network.chain_id != self._network.chain_id:
            self._activate(network, web3)
        return None

    def _activate(self, network: NetworkDescriptor, web3: Optional[AsyncWeb3] = None) -> None:
        self._network = network
        self._web3 = web3 or self._factory(network)
        log.info("Switched to %s (%s)", network.name, network.chain_id)
        self._emit(EVENT_CHAIN_CHANGED, network.chain_id)

    async def _send_transaction(self, params: Any) -> str:
        tx = dict(_first_param(METHOD_SEND_TRANSACTION, params))
        sender = tx.pop("from", None)
        if not self._connected or not sender or sender.lower() != self.address.lower():
            raise ProviderRequestError(
                message="The requested account has not been authorized by the user.",
                operation=METHOD_SEND_TRANSACTION,
                code=CODE_UNAUTHORIZED,
            )

        try:
            for key in _QUANTITY_FIELDS:
                if key in tx:
                    tx[key] = to_int(tx[key])
            tx["to"] = Web3.to_checksum_address(tx["to"])
            tx.setdefault("value", 0)
            tx["chainId"] = self._network.chain_id_int

            eth = self._web3.eth
            if "nonce" not in tx:
                tx["nonce"] = await eth.get_transaction_count(self.address, "pending")
            if "gasPrice" not in tx and "maxFeePerGas" not in tx:
                tx["gasPrice"] = await eth.gas_price
            if "gas" not in tx:
                tx["gas"] = await eth.estimate_gas({**tx, "from": self.address})

            signed = self._account.sign_transaction(tx)
            tx_hash = await eth.send_raw_transaction(signed.raw_transaction)
        except ProviderRequestError:
            raise
        except Exception as exc:
            raise ProviderRequestError(
                message=str(exc) or type(exc).__name__,
                operation=METHOD_SEND_TRANSACTION,
                code=ERROR_CODES["INTERNAL_ERROR"],
                cause=exc,
            ) from exc

        tx_hex = Web3.to_hex(tx_hash)
        log.info("Sent transaction %s on %s", tx_hex, self._network.chain_id)
        return tx_hex

    async def _get_receipt(self, params: Any) -> Optional[Dict[str, Any]]:
        tx_hash = _first_param(METHOD_GET_RECEIPT, params)
        try:
            receipt = await self._web3.eth.get_transaction_receipt(tx_hash)
        except TransactionNotFound:
            return None
        return {
            "transactionHash": Web3.to_hex(receipt["transactionHash"]),
            "blockNumber": hex(receipt["blockNumber"]),
            "status": hex(receipt["status"]),
        }

    async def _forward(self, method: str, params: Any) -> Any:
        response = await self._web3.provider.make_request(method, params or [])
        error = response.get("error")
        if error:
            raise ProviderRequestError(
                message=str(error.get("message", error)),
                operation=method,
                code=error.get("code"),
                data=error.get("data"),
            )
        return response.get("result")
