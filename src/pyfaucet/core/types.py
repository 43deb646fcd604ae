from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class ProviderSession:
    """What the wallet has told us: the authorized account and the active chain."""
    account: Optional[str] = None
    active_chain_id: Optional[str] = None
