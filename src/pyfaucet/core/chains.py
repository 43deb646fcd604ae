from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Tuple


@dataclass(frozen=True)
class NativeCurrency:
    name: str
    symbol: str
    decimals: int = 18


@dataclass(frozen=True)
class NetworkDescriptor:
    chain_id: str
    name: str
    rpc_urls: Tuple[str, ...]
    currency: NativeCurrency
    block_explorer_urls: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "chain_id", normalize_chain_id(self.chain_id))
        object.__setattr__(self, "rpc_urls", tuple(self.rpc_urls))
        object.__setattr__(self, "block_explorer_urls", tuple(self.block_explorer_urls))
        if not self.rpc_urls:
            raise ValueError(f"Network {self.name} needs at least one RPC URL")

    @property
    def chain_id_int(self) -> int:
        return int(self.chain_id, 16)

    @property
    def rpc_url(self) -> str:
        return self.rpc_urls[0]

    @property
    def explorer_url(self) -> str | None:
        if not self.block_explorer_urls:
            return None
        return self.block_explorer_urls[0].rstrip("/")

    def tx_url(self, tx_hash: str) -> str | None:
        if self.explorer_url is None:
            return None
        return f"{self.explorer_url}/tx/{tx_hash}"

    def address_url(self, address: str) -> str | None:
        if self.explorer_url is None:
            return None
        return f"{self.explorer_url}/address/{address}"

    def to_add_chain_params(self) -> Dict[str, Any]:
        """Parameters for ``wallet_addEthereumChain`` (EIP-3085)."""
        params: Dict[str, Any] = {
            "chainId": self.chain_id,
            "chainName": self.name,
            "rpcUrls": list(self.rpc_urls),
            "nativeCurrency": {
                "name": self.currency.name,
                "symbol": self.currency.symbol,
                "decimals": self.currency.decimals,
            },
        }
        if self.block_explorer_urls:
            params["blockExplorerUrls"] = list(self.block_explorer_urls)
        return params

    @classmethod
    def from_add_chain_params(cls, params: Mapping[str, Any]) -> "NetworkDescriptor":
        try:
            currency = params["nativeCurrency"]
            return cls(
                chain_id=params["chainId"],
                name=params["chainName"],
                rpc_urls=tuple(params["rpcUrls"]),
                currency=NativeCurrency(
                    name=currency["name"],
                    symbol=currency["symbol"],
                    decimals=int(currency["decimals"]),
                ),
                block_explorer_urls=tuple(params.get("blockExplorerUrls") or ()),
            )
        except (KeyError, TypeError) as exc:
            raise ValueError(f"Invalid chain parameters: {exc}") from exc


def normalize_chain_id(value: str | int) -> str:
    """Return the canonical lowercase hex form of a chain id."""
    if isinstance(value, bool):
        raise ValueError(f"Invalid chain id: {value!r}")
    if isinstance(value, int):
        number = value
    elif isinstance(value, str):
        text = value.strip()
        try:
            if text[:2].lower() == "0x":
                number = int(text, 16)
            else:
                number = int(text, 10)
        except ValueError:
            raise ValueError(f"Invalid chain id: {value!r}") from None
    else:
        raise ValueError(f"Invalid chain id: {value!r}")
    if number <= 0:
        raise ValueError(f"Invalid chain id: {value!r}")
    return hex(number)


CHAIN_ID_CORE_TESTNET2 = 1114

CORE_TESTNET2 = NetworkDescriptor(
    chain_id=hex(CHAIN_ID_CORE_TESTNET2),
    name="Core Testnet 2",
    rpc_urls=("http://rpc.test2.btcs.network/",),
    currency=NativeCurrency(name="tCORE2", symbol="tCORE2", decimals=18),
    block_explorer_urls=("https://explorer.btcs.network",),
)

NETWORKS: Dict[str, NetworkDescriptor] = {
    CORE_TESTNET2.chain_id: CORE_TESTNET2,
}


def as_network(network: NetworkDescriptor | str | int) -> NetworkDescriptor:
    if isinstance(network, NetworkDescriptor):
        return network
    if network in ("core-testnet2", "core_testnet2"):
        return CORE_TESTNET2
    try:
        return NETWORKS[normalize_chain_id(network)]
    except (KeyError, ValueError):
        raise ValueError(f"Unsupported network: {network}") from None
