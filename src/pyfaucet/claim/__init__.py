from .contract import FaucetContract
from .types import ClaimReceipt, ClaimStatus, ClaimTransaction
from .workflow import ClaimWorkflow

__all__ = [
    "ClaimReceipt",
    "ClaimStatus",
    "ClaimTransaction",
    "ClaimWorkflow",
    "FaucetContract",
]
