"""Core primitives: networks, constants and errors."""

from .chains import (
    CORE_TESTNET2,
    NETWORKS,
    NativeCurrency,
    NetworkDescriptor,
    as_network,
    normalize_chain_id,
)
from .constants import ERROR_CODES, FAUCET_ADDRESS, FAUCET_FUNCTION
from .errors import (
    ClaimInProgressError,
    ConfirmationError,
    FaucetError,
    NoProviderError,
    NotConnectedError,
    ProviderRequestError,
    SubmissionError,
    WrongNetworkError,
)
from .utils import format_address, to_int

__all__ = [
    "NetworkDescriptor",
    "NativeCurrency",
    "CORE_TESTNET2",
    "NETWORKS",
    "as_network",
    "normalize_chain_id",
    "ERROR_CODES",
    "FAUCET_ADDRESS",
    "FAUCET_FUNCTION",
    "FaucetError",
    "NoProviderError",
    "NotConnectedError",
    "WrongNetworkError",
    "ProviderRequestError",
    "SubmissionError",
    "ConfirmationError",
    "ClaimInProgressError",
    "format_address",
    "to_int",
]
