from .base import EIP1193Provider, ProviderAdapter
from .local import LocalWalletProvider

__all__ = [
    "EIP1193Provider",
    "ProviderAdapter",
    "LocalWalletProvider",
]
