"""
Identity types.

Defines the identity state consumed by stores and the exceptions raised
by identity providers.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum


class AuthProvider(Enum):
    """Supported identity sources."""

    CONFIG = "config"  # Local settings file (dev/offline)
    SESSION = "session"  # Driven in-process by the host's auth layer


@dataclass(frozen=True)
class IdentityState:
    """What stores know about the current user.

    ``user_id`` is None for anonymous (local-only) use. ``loading`` is
    True while the provider is still resolving the session; no store
    materializes state during that time.
    """

    user_id: str | None
    loading: bool = False
    display_name: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return not self.loading and self.user_id is not None

    @classmethod
    def resolving(cls) -> "IdentityState":
        return cls(user_id=None, loading=True)

    @classmethod
    def anonymous(cls) -> "IdentityState":
        return cls(user_id=None, loading=False)


# Listener invoked on every identity change
IdentityListener = Callable[[IdentityState], Awaitable[None]]


class IdentityError(Exception):
    """Base class for identity errors."""

    pass


class AuthenticationRequiredError(IdentityError):
    """Raised when a signed-in user is required but none is present."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)
        self.message = message
