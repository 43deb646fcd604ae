from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class FaucetError(Exception):
    message: str
    component: str = "faucet"
    operation: str = ""
    cause: Optional[BaseException] = None

    def __str__(self) -> str:
        base = f"{self.component}.{self.operation}: {self.message}" if self.operation else self.message
        if self.cause is not None:
            return f"{base} (cause: {self.cause})"
        return base

    @property
    def user_message(self) -> str:
        """Text shown to the user, without component prefixes or causes."""
        return self.message


@dataclass
class NoProviderError(FaucetError):
    message: str = "No wallet provider detected. Please install MetaMask or another EIP-1193 wallet."
    component: str = "provider"


@dataclass
class NotConnectedError(FaucetError):
    message: str = "Please connect your wallet first."
    component: str = "claim"
    operation: str = "submit_claim"


@dataclass
class WrongNetworkError(FaucetError):
    message: str = "Please switch to the faucet network to claim tokens."
    component: str = "claim"
    operation: str = "submit_claim"
    expected_chain_id: Optional[str] = None
    actual_chain_id: Optional[str] = None


@dataclass
class ProviderRequestError(FaucetError):
    message: str = "Provider request failed"
    component: str = "provider"
    code: Optional[int] = None
    data: object = None

    def __str__(self) -> str:
        base = super().__str__()
        if self.code is not None:
            return f"{base} [code {self.code}]"
        return base


@dataclass
class SubmissionError(FaucetError):
    message: str = "Failed to submit claim transaction"
    component: str = "claim"
    operation: str = "submit"


@dataclass
class ConfirmationError(FaucetError):
    message: str = "Claim transaction failed during confirmation"
    component: str = "claim"
    operation: str = "confirm"
    tx_hash: Optional[str] = None


@dataclass
class ClaimInProgressError(FaucetError):
    message: str = "A claim is already in progress."
    component: str = "claim"
    operation: str = "submit_claim"