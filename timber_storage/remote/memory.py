"""
In-memory remote document client.

Stands in for a remote document store in offline development and tests.
Latency and failures can be injected to exercise the best-effort path.
"""

from __future__ import annotations

import asyncio
import copy
import uuid
from collections.abc import Callable
from datetime import datetime
from typing import Any

from ..exceptions import RecordNotFoundError, StorageConnectionError
from ..models import format_datetime, utc_now
from .base import RemoteDocumentClient, check_field_name

_BACKEND_KEYS = ("id", "createdAt", "updatedAt")


class InMemoryDocumentClient(RemoteDocumentClient):
    """Dict-backed document store.

    Args:
        clock: Source of server timestamps
        latency: Seconds every call sleeps before touching data

    Set ``failing`` to a set of operation names ("get", "list_all",
    "create", "update", "delete", "delete_all") to make those calls raise
    StorageConnectionError.
    """

    def __init__(self, clock: Callable[[], datetime] = utc_now, latency: float = 0.0):
        self.clock = clock
        self.latency = latency
        self.failing: set[str] = set()
        self.calls: list[tuple[str, str, str]] = []
        self._data: dict[tuple[str, str], dict[str, dict[str, Any]]] = {}

    async def _enter(self, operation: str, user_id: str, collection: str) -> dict[str, dict[str, Any]]:
        self.calls.append((operation, user_id, collection))
        if self.latency:
            await asyncio.sleep(self.latency)
        if operation in self.failing:
            raise StorageConnectionError("memory", RuntimeError(f"{operation} unavailable"))
        return self._data.setdefault((user_id, collection), {})

    def _stamp(self) -> str:
        return format_datetime(self.clock()) or ""

    async def get(self, user_id: str, collection: str, document_id: str) -> dict[str, Any] | None:
        docs = await self._enter("get", user_id, collection)
        doc = docs.get(document_id)
        return copy.deepcopy(doc) if doc is not None else None

    async def list_all(
        self,
        user_id: str,
        collection: str,
        order_by: str | None = None,
        descending: bool = True,
    ) -> list[dict[str, Any]]:
        docs = await self._enter("list_all", user_id, collection)
        result = [copy.deepcopy(doc) for doc in docs.values()]
        if order_by:
            check_field_name(order_by)
            result.sort(key=lambda doc: str(doc.get(order_by) or ""), reverse=descending)
        return result

    async def create(
        self,
        user_id: str,
        collection: str,
        record: dict[str, Any],
        document_id: str | None = None,
    ) -> str:
        docs = await self._enter("create", user_id, collection)
        document_id = document_id or uuid.uuid4().hex[:20]
        now = self._stamp()
        body = {k: copy.deepcopy(v) for k, v in record.items() if k not in _BACKEND_KEYS}
        docs[document_id] = {**body, "id": document_id, "createdAt": now, "updatedAt": now}
        return document_id

    async def update(
        self,
        user_id: str,
        collection: str,
        document_id: str,
        fields: dict[str, Any],
    ) -> None:
        docs = await self._enter("update", user_id, collection)
        if document_id not in docs:
            raise RecordNotFoundError(collection, document_id)
        changes = {k: copy.deepcopy(v) for k, v in fields.items() if k not in _BACKEND_KEYS}
        docs[document_id].update(changes)
        docs[document_id]["updatedAt"] = self._stamp()

    async def delete(self, user_id: str, collection: str, document_id: str) -> None:
        docs = await self._enter("delete", user_id, collection)
        docs.pop(document_id, None)

    async def delete_all(self, user_id: str, collection: str) -> int:
        docs = await self._enter("delete_all", user_id, collection)
        count = len(docs)
        docs.clear()
        return count

    def documents(self, user_id: str, collection: str) -> dict[str, dict[str, Any]]:
        """Direct view of stored documents, for assertions."""
        return self._data.get((user_id, collection), {})

    def count_calls(self, operation: str, collection: str | None = None) -> int:
        return sum(
            1 for op, _, coll in self.calls if op == operation and (collection is None or coll == collection)
        )
