"""
Session state seen by the stores.

Every store resolves the published IdentityState into one of three
states, and handles each one explicitly:

- SessionLoading: identity unresolved; nothing is materialized.
- Anonymous: local persistent storage is authoritative.
- Authenticated: the remote document store is authoritative.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .identity import IdentityState


@dataclass(frozen=True)
class SessionLoading:
    pass


@dataclass(frozen=True)
class Anonymous:
    pass


@dataclass(frozen=True)
class Authenticated:
    user_id: str


SessionState = SessionLoading | Anonymous | Authenticated


def session_state(identity: IdentityState) -> SessionState:
    """Resolve an identity into the session state stores act on."""
    if identity.loading:
        return SessionLoading()
    if identity.user_id is None:
        return Anonymous()
    return Authenticated(identity.user_id)


class StoreStatus(Enum):
    """Load status exposed by every store."""

    LOADING = "loading"
    READY = "ready"
