"""
ClaimWorkflow - one faucet claim, end to end.

    idle -> pending -> success | error

An attempt that passes the readiness check gets a fresh ClaimTransaction;
a refused attempt leaves the previous one in place. The transaction hash is
published as soon as the wallet returns it, before the (unbounded)
confirmation wait starts.
"""
from __future__ import annotations

import logging
from typing import Callable, Optional

from pyfaucet.core.errors import (
    ClaimInProgressError,
    ConfirmationError,
    FaucetError,
    NotConnectedError,
    SubmissionError,
    WrongNetworkError,
)
from pyfaucet.session.state import SessionState
from .contract import FaucetContract
from .types import ClaimStatus, ClaimTransaction

log = logging.getLogger(__name__)


class ClaimWorkflow:
    def __init__(
        self,
        session: SessionState,
        contract: FaucetContract,
        on_change: Optional[Callable[[], None]] = None,
    ) -> None:
        self._session = session
        self._contract = contract
        self._on_change = on_change
        self._current: Optional[ClaimTransaction] = None
        self._busy = False

    @property
    def current(self) -> Optional[ClaimTransaction]:
        return self._current

    @property
    def busy(self) -> bool:
        return self._busy

    @property
    def session(self) -> SessionState:
        return self._session

    @property
    def contract(self) -> FaucetContract:
        return self._contract

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change()

    async def submit_claim(self) -> ClaimTransaction:
        """
        Claim tokens for the connected account.

        Returns:
            The ClaimTransaction in its ``success`` state

        Raises:
            ClaimInProgressError: If another claim is still pending
            NotConnectedError: If no account is connected
            WrongNetworkError: If the wallet is not on the target network
            SubmissionError: If the wallet refused or failed to send the call
            ConfirmationError: If the transaction failed after submission
        """
        if self._busy:
            raise ClaimInProgressError()
        try:
            self._check_preconditions()
        except (NotConnectedError, WrongNetworkError) as exc:
            log.warning("Claim refused: %s", exc.user_message)
            raise

        tx = ClaimTransaction()
        self._current = tx
        try:
            self._busy = True
            tx.status = ClaimStatus.PENDING
            self._notify()

            account = self._session.account
            try:
                tx.hash = await self._contract.submit(account)
            except FaucetError as exc:
                raise SubmissionError(message=exc.user_message, cause=exc) from exc
            except Exception as exc:
                raise SubmissionError(message=str(exc) or type(exc).__name__, cause=exc) from exc
            log.info("Claim submitted: %s", tx.hash)
            self._notify()

            try:
                receipt = await self._contract.wait_for_receipt(tx.hash)
            except ConfirmationError:
                raise
            except FaucetError as exc:
                raise ConfirmationError(message=exc.user_message, tx_hash=tx.hash, cause=exc) from exc
            except Exception as exc:
                raise ConfirmationError(message=str(exc) or type(exc).__name__, tx_hash=tx.hash, cause=exc) from exc

            tx.block_number = receipt.block_number
            tx.status = ClaimStatus.SUCCESS
            log.info("Claim confirmed in block %s: %s", receipt.block_number, tx.hash)
            return tx
        except FaucetError as exc:
            tx.status = ClaimStatus.ERROR
            tx.error_detail = exc.user_message
            log.error("Claim failed: %s", exc)
            raise
        finally:
            self._busy = False
            self._notify()

    def _check_preconditions(self) -> None:
        if self._session.account is None:
            raise NotConnectedError()
        network = self._session.network
        if not network.is_matched:
            raise WrongNetworkError(
                message=f"Please switch to {network.target.name} to claim tokens.",
                expected_chain_id=network.target.chain_id,
                actual_chain_id=network.active_chain_id,
            )
