from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ClaimStatus(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class ClaimTransaction:
    hash: Optional[str] = None
    status: ClaimStatus = ClaimStatus.IDLE
    error_detail: Optional[str] = None
    block_number: Optional[int] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in (ClaimStatus.SUCCESS, ClaimStatus.ERROR)


@dataclass
class ClaimReceipt:
    tx_hash: str
    block_number: Optional[int]
    status: int
