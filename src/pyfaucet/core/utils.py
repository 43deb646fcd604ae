from __future__ import annotations

from typing import Any, Optional


def format_address(address: str, head: int = 6, tail: int = 4) -> str:
    if len(address) <= head + tail:
        return address
    return f"{address[:head]}...{address[-tail:]}"


def to_int(value: Any) -> Optional[int]:
    """Decode an RPC quantity that may arrive as hex string or int."""
    if value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text[:2].lower() == "0x":
            return int(text, 16)
        return int(text)
    raise ValueError(f"Invalid quantity: {value!r}")
