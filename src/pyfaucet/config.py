"""Configuration loading: TOML file + environment variables."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from pyfaucet.core.chains import CORE_TESTNET2, NativeCurrency, NetworkDescriptor, normalize_chain_id
from pyfaucet.core.constants import FAUCET_ADDRESS, RECEIPT_POLL_INTERVAL


@dataclass
class FaucetConfig:
    """Complete faucet configuration."""

    # Network
    chain_id: str = CORE_TESTNET2.chain_id
    network_name: str = CORE_TESTNET2.name
    rpc_urls: List[str] = field(default_factory=lambda: list(CORE_TESTNET2.rpc_urls))
    currency_name: str = CORE_TESTNET2.currency.name
    currency_symbol: str = CORE_TESTNET2.currency.symbol
    currency_decimals: int = CORE_TESTNET2.currency.decimals
    explorer_url: Optional[str] = CORE_TESTNET2.explorer_url

    # Faucet
    contract_address: str = FAUCET_ADDRESS
    poll_interval: float = RECEIPT_POLL_INTERVAL  # seconds
    confirmation_timeout: Optional[float] = None  # seconds, None waits forever

    # Wallet
    private_key: str = ""  # loaded from env var PYFAUCET_PRIVATE_KEY
    wallet_rpc_url: Optional[str] = None  # chain the headless wallet starts on

    # Logging
    log_level: str = "info"

    def network(self) -> NetworkDescriptor:
        return NetworkDescriptor(
            chain_id=self.chain_id,
            name=self.network_name,
            rpc_urls=tuple(self.rpc_urls),
            currency=NativeCurrency(
                name=self.currency_name,
                symbol=self.currency_symbol,
                decimals=self.currency_decimals,
            ),
            block_explorer_urls=(self.explorer_url,) if self.explorer_url else (),
        )


def load_config(
    config_path: str | Path | None = None,
    env_prefix: str = "PYFAUCET_",
) -> FaucetConfig:
    """Load faucet configuration from a TOML file and env vars.

    Priority (highest wins):
        1. Environment variables (PYFAUCET_PRIVATE_KEY, etc.)
        2. TOML config file
        3. Defaults from FaucetConfig (Core Testnet 2)
    """
    raw: dict = {}
    if config_path is not None:
        p = Path(config_path).expanduser()
        if p.exists():
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    cfg = FaucetConfig()

    # ── Network section ────────────────────────────────────
    network = raw.get("network", {})
    if v := network.get("chain_id"):
        cfg.chain_id = normalize_chain_id(v)
    if v := network.get("name"):
        cfg.network_name = str(v)
    if v := network.get("rpc_urls"):
        cfg.rpc_urls = [str(u) for u in ([v] if isinstance(v, str) else v)]
    if v := network.get("currency_name"):
        cfg.currency_name = str(v)
    if v := network.get("currency_symbol"):
        cfg.currency_symbol = str(v)
    if (v := network.get("currency_decimals")) is not None:
        cfg.currency_decimals = int(v)
    if "explorer_url" in network:
        cfg.explorer_url = str(network["explorer_url"]) or None

    # ── Faucet section ─────────────────────────────────────
    faucet = raw.get("faucet", {})
    if v := faucet.get("contract_address"):
        cfg.contract_address = str(v)
    if v := faucet.get("poll_interval"):
        cfg.poll_interval = float(v)
    if v := faucet.get("confirmation_timeout"):
        cfg.confirmation_timeout = float(v)

    # ── Wallet section ─────────────────────────────────────
    wallet = raw.get("wallet", {})
    if v := wallet.get("private_key"):
        cfg.private_key = str(v)
    if v := wallet.get("rpc_url"):
        cfg.wallet_rpc_url = str(v)

    # ── Logging section ────────────────────────────────────
    logging_raw = raw.get("logging", {})
    if v := logging_raw.get("level"):
        cfg.log_level = str(v)

    # ── Environment variable overrides (highest priority) ──
    if key := os.environ.get(f"{env_prefix}PRIVATE_KEY"):
        cfg.private_key = key
    if rpc := os.environ.get(f"{env_prefix}RPC_URL"):
        cfg.wallet_rpc_url = rpc
    if address := os.environ.get(f"{env_prefix}CONTRACT_ADDRESS"):
        cfg.contract_address = address
    if chain := os.environ.get(f"{env_prefix}CHAIN_ID"):
        cfg.chain_id = normalize_chain_id(chain)
    if level := os.environ.get(f"{env_prefix}LOG_LEVEL"):
        cfg.log_level = level

    return cfg
