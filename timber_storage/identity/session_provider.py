"""
In-process session identity provider.

Bridges a host application's auth layer (e.g. a Firebase Auth state
callback) into the store subscription model.
"""

from .provider import IdentityProvider
from .types import AuthProvider, IdentityState


class SessionIdentityProvider(IdentityProvider):
    """Identity provider driven by explicit sign-in/sign-out calls.

    Usage:
        provider = SessionIdentityProvider()
        await storage.start()                  # stores see "loading"
        await provider.initialize()            # anonymous
        await provider.sign_in("uid-123")      # stores load remote state
        await provider.sign_out()              # stores revert to local
    """

    def __init__(self, initial_user_id: str | None = None) -> None:
        super().__init__()
        self._initial_user_id = initial_user_id

    async def initialize(self) -> IdentityState:
        state = IdentityState(user_id=self._initial_user_id, loading=False)
        await self._publish(state)
        return state

    async def sign_in(self, user_id: str, display_name: str | None = None) -> IdentityState:
        """Publish a signed-in state.

        Publishes even when the same user is already signed in, matching
        auth SDKs that re-fire their state callback.
        """
        state = IdentityState(user_id=user_id, loading=False, display_name=display_name)
        await self._publish(state)
        return state

    async def sign_out(self) -> None:
        await self._publish(IdentityState.anonymous())

    async def refresh(self) -> IdentityState:
        return self.state

    @property
    def provider_type(self) -> AuthProvider:
        return AuthProvider.SESSION
