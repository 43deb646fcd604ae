"""
Pure projection of faucet state onto what a user interface shows.

Nothing here mutates session or claim state; every flag is derived from the
inputs so the display can never drift from the model.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pyfaucet.claim.types import ClaimStatus, ClaimTransaction
from pyfaucet.core.chains import NetworkDescriptor
from pyfaucet.core.types import ProviderSession
from pyfaucet.core.utils import format_address


class ViewState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED_WRONG_NETWORK = "connected-wrong-network"
    CONNECTED_READY = "connected-ready"
    CLAIM_PENDING = "claim-pending"
    CLAIM_SUCCESS = "claim-success"
    CLAIM_ERROR = "claim-error"


@dataclass(frozen=True)
class FaucetView:
    state: ViewState
    message: str
    network_name: str
    account: Optional[str] = None
    short_account: Optional[str] = None
    tx_hash: Optional[str] = None
    tx_url: Optional[str] = None
    can_connect: bool = False
    can_claim: bool = False
    can_switch_network: bool = False


def project(
    session: ProviderSession,
    ready: bool,
    claim: Optional[ClaimTransaction],
    switching: bool,
    *,
    target: NetworkDescriptor,
    notice: Optional[str] = None,
) -> FaucetView:
    account = session.account
    pending = claim is not None and claim.status is ClaimStatus.PENDING

    if switching:
        state, message = ViewState.CONNECTING, "Switching network..."
    elif pending:
        state, message = ViewState.CLAIM_PENDING, "Claiming tokens..."
    elif account is None:
        state = ViewState.DISCONNECTED
        message = notice or "Connect your wallet to claim testnet tokens."
    elif not ready:
        state = ViewState.CONNECTED_WRONG_NETWORK
        message = notice or f"Please switch to {target.name} to claim tokens."
    elif claim is not None and claim.status is ClaimStatus.SUCCESS:
        state, message = ViewState.CLAIM_SUCCESS, "Tokens have been sent to your wallet."
    elif claim is not None and claim.status is ClaimStatus.ERROR:
        state = ViewState.CLAIM_ERROR
        message = claim.error_detail or "Failed to claim tokens."
    else:
        state = ViewState.CONNECTED_READY
        message = notice or "Ready to claim testnet tokens."

    tx_hash = claim.hash if claim is not None else None
    busy = switching or pending
    return FaucetView(
        state=state,
        message=message,
        network_name=target.name,
        account=account,
        short_account=format_address(account) if account else None,
        tx_hash=tx_hash,
        tx_url=target.tx_url(tx_hash) if tx_hash else None,
        can_connect=account is None and not busy,
        can_claim=account is not None and ready and not busy,
        can_switch_network=account is not None and not ready and not busy,
    )
