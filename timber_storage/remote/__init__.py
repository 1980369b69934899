"""
Remote document clients.

Provides the abstract remote document interface and its backends
(in-memory, Cosmos DB, and Firestore when firebase-admin is installed).
"""

from .base import RemoteCollection, RemoteDocumentClient
from .cosmos import AUTH_DEFAULT_CREDENTIAL, AUTH_KEY, CosmosConfig, CosmosDocumentClient
from .memory import InMemoryDocumentClient

# Firestore needs the optional firebase extra
try:
    from .firestore import FirestoreDocumentClient  # noqa: F401

    _has_firestore = True
except ImportError:
    _has_firestore = False

__all__ = [
    "RemoteDocumentClient",
    "RemoteCollection",
    "InMemoryDocumentClient",
    "CosmosConfig",
    "CosmosDocumentClient",
    "AUTH_KEY",
    "AUTH_DEFAULT_CREDENTIAL",
]

if _has_firestore:
    __all__.append("FirestoreDocumentClient")
