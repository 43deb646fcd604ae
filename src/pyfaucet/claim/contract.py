from __future__ import annotations

import asyncio
import logging
import time
from typing import Optional

from eth_utils import function_signature_to_4byte_selector, to_checksum_address

from pyfaucet.core.constants import (
    FAUCET_FUNCTION,
    METHOD_GET_RECEIPT,
    METHOD_SEND_TRANSACTION,
    RECEIPT_POLL_INTERVAL,
)
from pyfaucet.core.errors import ConfirmationError, ProviderRequestError
from pyfaucet.core.utils import to_int
from pyfaucet.provider.base import ProviderAdapter
from .types import ClaimReceipt

log = logging.getLogger(__name__)


class FaucetContract:
    """
    The faucet's single no-argument, state-mutating entry point.

    Transactions go through the wallet (``eth_sendTransaction``), so the
    wallet signs them as the connected account.
    """

    def __init__(
        self,
        provider: ProviderAdapter,
        address: str,
        function_signature: str = FAUCET_FUNCTION,
        poll_interval: float = RECEIPT_POLL_INTERVAL,
        timeout: Optional[float] = None,
    ) -> None:
        self._provider = provider
        self._address = to_checksum_address(address)
        self._selector = "0x" + function_signature_to_4byte_selector(function_signature).hex()
        self._poll_interval = poll_interval
        self._timeout = timeout

    @property
    def address(self) -> str:
        return self._address

    @property
    def calldata(self) -> str:
        return self._selector

    async def submit(self, sender: str) -> str:
        """Send the faucet call from ``sender`` and return the transaction hash."""
        tx_hash = await self._provider.request(
            METHOD_SEND_TRANSACTION,
            [{"from": sender, "to": self._address, "data": self._selector}],
        )
        if not isinstance(tx_hash, str) or not tx_hash.startswith("0x"):
            raise ProviderRequestError(
                message=f"Invalid transaction hash returned by wallet: {tx_hash!r}",
                operation=METHOD_SEND_TRANSACTION,
            )
        return tx_hash

    async def wait_for_receipt(self, tx_hash: str) -> ClaimReceipt:
        """
        Poll until the transaction is included.

        Raises:
            ConfirmationError: If the transaction reverted or the wait timed out
            ProviderRequestError: If the receipt lookup itself fails
        """
        deadline = None if self._timeout is None else time.monotonic() + self._timeout
        while True:
            receipt = await self._provider.request(METHOD_GET_RECEIPT, [tx_hash])
            if receipt:
                result = ClaimReceipt(
                    tx_hash=tx_hash,
                    block_number=to_int(receipt.get("blockNumber")),
                    status=to_int(receipt.get("status")) or 0,
                )
                if result.status != 1:
                    raise ConfirmationError(message="Transaction reverted", tx_hash=tx_hash)
                return result
            if deadline is not None and time.monotonic() >= deadline:
                raise ConfirmationError(
                    message=f"Timed out waiting for transaction {tx_hash}",
                    tx_hash=tx_hash,
                )
            log.debug("Waiting for %s to be mined", tx_hash)
            await asyncio.sleep(self._poll_interval)
