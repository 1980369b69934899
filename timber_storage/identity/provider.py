"""
Identity provider abstract interface.

Defines the contract that all identity providers must implement, plus
the subscription plumbing shared by every provider.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable

from .types import AuthProvider, IdentityListener, IdentityState

logger = logging.getLogger(__name__)


class IdentityProvider(ABC):
    """Abstract identity provider.

    A provider owns the current IdentityState and notifies subscribers on
    every sign-in, sign-out, or refresh that changes identity. Providers
    are injected into stores rather than looked up globally, so tests can
    drive stores with a fake provider.

    Listeners are awaited in subscription order. A failing listener is
    logged and does not prevent the others from running.
    """

    def __init__(self) -> None:
        self._state = IdentityState.resolving()
        self._listeners: list[IdentityListener] = []

    @property
    def state(self) -> IdentityState:
        """The most recently published identity state."""
        return self._state

    def subscribe(self, listener: IdentityListener) -> Callable[[], None]:
        """Register ``listener`` for identity changes.

        Returns:
            A callable that removes the subscription
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            self.unsubscribe(listener)

        return unsubscribe

    def unsubscribe(self, listener: IdentityListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def _publish(self, state: IdentityState) -> None:
        self._state = state
        for listener in list(self._listeners):
            try:
                await listener(state)
            except Exception:
                logger.exception("Identity listener failed")

    @abstractmethod
    async def initialize(self) -> IdentityState:
        """Resolve the initial session and publish it.

        Returns:
            The resolved IdentityState (never loading)
        """
        ...

    @abstractmethod
    async def refresh(self) -> IdentityState:
        """Re-resolve identity, publishing only if it changed."""
        ...

    @abstractmethod
    async def sign_out(self) -> None:
        """Sign out and publish the anonymous state."""
        ...

    @property
    @abstractmethod
    def provider_type(self) -> AuthProvider:
        """Get the provider type."""
        ...
