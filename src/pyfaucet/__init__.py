"""pyfaucet - connect a wallet, reconcile its network and claim testnet tokens."""

from ._version import __version__
from .faucet import ActionResult, AsyncFaucet

__all__ = ["__version__", "AsyncFaucet", "ActionResult"]
