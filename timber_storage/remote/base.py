"""
Remote document client interface.

A remote document client stores JSON-like documents per user and per
named collection. Backends stamp ``createdAt`` and ``updatedAt``; callers
never supply them. Every returned document carries ``id`` equal to its
document key.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import Any

from ..exceptions import ValidationError

_FIELD_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def check_field_name(name: str) -> str:
    """Validate a field name used in ordering or update paths."""
    if not _FIELD_NAME.match(name):
        raise ValidationError("order_by", "invalid field name", name)
    return name


class RemoteDocumentClient(ABC):
    """Abstract remote document store scoped by user id and collection."""

    async def initialize(self) -> None:
        """Open connections. Safe to call more than once."""
        return None

    @abstractmethod
    async def get(self, user_id: str, collection: str, document_id: str) -> dict[str, Any] | None:
        """Fetch one document, or None if it does not exist."""
        ...

    @abstractmethod
    async def list_all(
        self,
        user_id: str,
        collection: str,
        order_by: str | None = None,
        descending: bool = True,
    ) -> list[dict[str, Any]]:
        """Fetch every document in a collection, optionally ordered by a field."""
        ...

    @abstractmethod
    async def create(
        self,
        user_id: str,
        collection: str,
        record: dict[str, Any],
        document_id: str | None = None,
    ) -> str:
        """Create (or overwrite) a document.

        Args:
            user_id: Owning user
            collection: Collection name
            record: Document body; ``id``, ``createdAt`` and ``updatedAt`` are ignored
            document_id: Key to store under; the backend assigns one if omitted

        Returns:
            The document id
        """
        ...

    @abstractmethod
    async def update(
        self,
        user_id: str,
        collection: str,
        document_id: str,
        fields: dict[str, Any],
    ) -> None:
        """Merge ``fields`` into an existing document and stamp ``updatedAt``.

        Raises:
            RecordNotFoundError: If the document does not exist
        """
        ...

    @abstractmethod
    async def delete(self, user_id: str, collection: str, document_id: str) -> None:
        """Hard-delete a document. Deleting a missing document is a no-op."""
        ...

    @abstractmethod
    async def delete_all(self, user_id: str, collection: str) -> int:
        """Delete every document in a collection. Returns the count deleted."""
        ...

    async def close(self) -> None:
        """Release connections."""
        return None

    def collection(
        self,
        user_id: str,
        name: str,
        order_by: str | None = None,
        descending: bool = True,
    ) -> RemoteCollection:
        return RemoteCollection(self, user_id, name, order_by, descending)


class RemoteCollection:
    """A client bound to one user's collection and its list ordering."""

    def __init__(
        self,
        client: RemoteDocumentClient,
        user_id: str,
        name: str,
        order_by: str | None = None,
        descending: bool = True,
    ):
        self.client = client
        self.user_id = user_id
        self.name = name
        self.order_by = order_by
        self.descending = descending

    async def get(self, document_id: str) -> dict[str, Any] | None:
        return await self.client.get(self.user_id, self.name, document_id)

    async def list_all(self) -> list[dict[str, Any]]:
        return await self.client.list_all(
            self.user_id, self.name, order_by=self.order_by, descending=self.descending
        )

    async def create(self, record: dict[str, Any], document_id: str | None = None) -> str:
        return await self.client.create(self.user_id, self.name, record, document_id=document_id)

    async def update(self, document_id: str, fields: dict[str, Any]) -> None:
        await self.client.update(self.user_id, self.name, document_id, fields)

    async def delete(self, document_id: str) -> None:
        await self.client.delete(self.user_id, self.name, document_id)

    async def delete_all(self) -> int:
        return await self.client.delete_all(self.user_id, self.name)
