#!/usr/bin/env python3
"""
pyfaucet Demo - claim tCORE2 on Core Testnet 2 with a headless wallet
"""
import asyncio
import os
import sys

from pyfaucet import AsyncFaucet
from pyfaucet.view import FaucetView

# Optional: start the wallet on another chain to watch the switch/add flow
WALLET_RPC_URL = os.environ.get("PYFAUCET_RPC_URL")


async def main():
    private_key = os.environ.get("PYFAUCET_PRIVATE_KEY")
    if not private_key:
        print("Set PYFAUCET_PRIVATE_KEY to a funded-or-empty testnet key first.")
        sys.exit(1)

    print("=" * 60)
    print("pyfaucet Demo - Core Testnet 2")
    print("=" * 60)

    # 1. Start the wallet
    print("\n[1/3] Starting wallet...")
    faucet = await AsyncFaucet.create(private_key=private_key, wallet_rpc_url=WALLET_RPC_URL)

    def show(view: FaucetView) -> None:
        print(f"  · {view.state.value}: {view.message}")

    faucet.add_listener(show)
    print(f"  ✓ Wallet is on chain {faucet.network.active_chain_id}")

    async with faucet:
        # 2. Connect (switches or adds the network as needed)
        print(f"\n[2/3] Connecting to {faucet.target.name}...")
        result = await faucet.connect()
        if not result.ok:
            print(f"  ✗ {result.message}")
            return
        print(f"  ✓ {result.message}")

        # 3. Claim
        print("\n[3/3] Claiming tokens...")
        result = await faucet.claim()
        view = faucet.view()
        if view.tx_url:
            print(f"  → Explorer: {view.tx_url}")
        print(f"  {'✓' if result.ok else '✗'} {result.message}")

    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
