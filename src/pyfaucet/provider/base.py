"""
ProviderAdapter - thin facade over an injected EIP-1193 wallet provider.

The adapter never decides anything on its own: it forwards requests, turns
provider failures into ``ProviderRequestError`` and keeps track of the event
subscriptions it made so they can all be dropped on teardown.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional, Protocol, Tuple

from pyfaucet.core.constants import PROVIDER_EVENTS
from pyfaucet.core.errors import NoProviderError, ProviderRequestError

log = logging.getLogger(__name__)

EventCallback = Callable[[Any], None]


class EIP1193Provider(Protocol):
    """Protocol for wallet providers (the shape of ``window.ethereum``)."""

    async def request(self, method: str, params: Any = None) -> Any:
        """Send a JSON-RPC style request to the wallet."""
        ...

    def on(self, event: str, callback: EventCallback) -> None:
        """Register a listener for a provider event."""
        ...

    def remove_listener(self, event: str, callback: EventCallback) -> None:
        """Remove a previously registered listener."""
        ...


class ProviderAdapter:
    """
    Wraps an optional provider.

    A missing provider is a normal state: callers branch on ``is_available``
    before issuing requests.

    Example:
        adapter = ProviderAdapter(provider)
        if adapter.is_available:
            chain_id = await adapter.request("eth_chainId")
    """

    def __init__(self, provider: Optional[EIP1193Provider] = None) -> None:
        self._provider = provider
        self._subscriptions: List[Tuple[str, EventCallback]] = []

    @property
    def is_available(self) -> bool:
        return self._provider is not None

    @property
    def provider(self) -> Optional[EIP1193Provider]:
        return self._provider

    async def request(self, method: str, params: Any = None) -> Any:
        if self._provider is None:
            raise NoProviderError(operation=method)
        log.debug("-> %s %r", method, params)
        try:
            result = await self._provider.request(method, params)
        except ProviderRequestError:
            raise
        except Exception as exc:
            raise _as_request_error(method, exc) from exc
        log.debug("<- %s %r", method, result)
        return result

    def subscribe(self, event: str, callback: EventCallback) -> Callable[[], None]:
        """Subscribe to a provider event and return the matching unsubscribe callable."""
        if event not in PROVIDER_EVENTS:
            raise ValueError(f"Unsupported provider event: {event}")
        if self._provider is None:
            return lambda: None
        self._provider.on(event, callback)
        entry = (event, callback)
        self._subscriptions.append(entry)

        def unsubscribe() -> None:
            if entry in self._subscriptions:
                self._subscriptions.remove(entry)
                self._provider.remove_listener(event, callback)

        return unsubscribe

    def close(self) -> None:
        """Remove every subscription made through this adapter."""
        if self._provider is None:
            return
        for event, callback in self._subscriptions:
            self._provider.remove_listener(event, callback)
        self._subscriptions.clear()


def _as_request_error(method: str, exc: Exception) -> ProviderRequestError:
    code = getattr(exc, "code", None)
    message = getattr(exc, "message", None) or str(exc) or type(exc).__name__
    return ProviderRequestError(
        message=str(message),
        operation=method,
        code=code if isinstance(code, int) else None,
        data=getattr(exc, "data", None),
        cause=exc,
    )
