"""
Identity management for timber storage.

Provides the identity state consumed by stores and the providers that
publish it.
"""

from .config_provider import ConfigFileIdentityProvider
from .provider import IdentityProvider
from .session_provider import SessionIdentityProvider
from .types import (
    IdentityError,
    AuthenticationRequiredError,
    AuthProvider,
    IdentityListener,
    IdentityState,
)

__all__ = [
    # Types
    "AuthProvider",
    "IdentityState",
    "IdentityListener",
    # Errors
    "IdentityError",
    "AuthenticationRequiredError",
    # Providers
    "IdentityProvider",
    "ConfigFileIdentityProvider",
    "SessionIdentityProvider",
]
