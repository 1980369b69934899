"""
Best-effort remote write path.

Stores commit every change locally first and then hand the remote
write to BestEffortSync. The caller never awaits the remote call and
never sees its failure: failures are logged with store and user context
and reported as a SyncResult. There is no retry queue.

Writes submitted to one BestEffortSync are applied remotely in the order
they were submitted.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from .exceptions import SyncError, TimberStorageError

T = TypeVar("T")


@dataclass(frozen=True)
class SyncResult(Generic[T]):
    """Outcome of one remote write."""

    operation: str
    ok: bool
    value: T | None = None
    error: TimberStorageError | None = None


class BestEffortSync:
    """Runs remote writes as tracked background tasks.

    Usage:
        sync = BestEffortSync(logger)
        sync.submit("create", remote.create(doc, document_id=item.id))
        ...
        await sync.flush()   # tests / shutdown
    """

    def __init__(self, logger: logging.Logger | logging.LoggerAdapter, collection: str | None = None):
        self._logger = logger
        self._collection = collection
        self._pending: set[asyncio.Task[SyncResult[Any]]] = set()
        self._order = asyncio.Lock()
        self.failures: list[SyncResult[Any]] = []

    @property
    def pending(self) -> int:
        return len(self._pending)

    def submit(self, operation: str, write: Awaitable[T]) -> asyncio.Task[SyncResult[T]]:
        """Schedule ``write`` and return immediately.

        Args:
            operation: Short name for logs (e.g. "create", "update")
            write: The remote call to run

        Returns:
            The background task; awaiting it yields the SyncResult
        """
        task = asyncio.create_task(self._run(operation, write))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _run(self, operation: str, write: Awaitable[T]) -> SyncResult[T]:
        async with self._order:
            try:
                value = await write
            except TimberStorageError as e:
                return self._failed(operation, e)
            except Exception as e:
                error = SyncError(f"Remote {operation} failed", self._collection, e)
                return self._failed(operation, error)
        return SyncResult(operation=operation, ok=True, value=value)

    def _failed(self, operation: str, error: TimberStorageError) -> SyncResult[Any]:
        self._logger.warning(
            f"Remote {operation} failed, local state kept: {error.message}",
            extra={"operation": operation, "error_details": error.details},
        )
        result: SyncResult[Any] = SyncResult(operation=operation, ok=False, error=error)
        self.failures.append(result)
        return result

    async def flush(self) -> list[SyncResult[Any]]:
        """Wait until every submitted write (including ones submitted meanwhile) is done."""
        results: list[SyncResult[Any]] = []
        while self._pending:
            results.extend(await asyncio.gather(*list(self._pending)))
        return results
