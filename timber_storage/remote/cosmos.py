"""
Cosmos DB remote document client.

All collections share a single container partitioned by ``/user_id``.
Documents carry a ``collection`` discriminator, and their Cosmos id is
prefixed with the collection name so ids from different collections
never collide within a partition.

``updatedAt`` is taken from the server-maintained ``_ts`` on every read,
and lists ordered by ``updatedAt`` sort on ``_ts``. Cosmos has no
server-side default values, so ``createdAt`` is stamped by the client.
"""

from __future__ import annotations

import asyncio
import logging
import os
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from azure.cosmos import PartitionKey
from azure.cosmos.aio import ContainerProxy, CosmosClient, DatabaseProxy
from azure.cosmos.exceptions import CosmosHttpResponseError, CosmosResourceNotFoundError
from azure.identity.aio import DefaultAzureCredential

from ..exceptions import (
    AuthenticationError,
    RecordNotFoundError,
    StorageConnectionError,
    StorageIOError,
)
from ..models import format_datetime, utc_now
from .base import RemoteDocumentClient, check_field_name

logger = logging.getLogger(__name__)

CONTAINER_NAME = "timber_data"

# Auth methods
AUTH_KEY = "key"
AUTH_DEFAULT_CREDENTIAL = "default_credential"

# Default retry configuration
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_DELAY = 1.0  # seconds

# Cosmos rejects patch requests with more operations than this
MAX_PATCH_OPERATIONS = 10

_BACKEND_KEYS = ("id", "createdAt", "updatedAt")
_ENVELOPE_KEYS = ("user_id", "collection", "doc_id")


@dataclass
class CosmosConfig:
    """Configuration for Cosmos DB storage.

    Attributes:
        endpoint: Cosmos DB account endpoint URL
        database_name: Name of the database to use
        container_name: Container holding all user documents
        auth_method: "key" or "default_credential"
        key: Account key (key auth only)
        max_retries: Maximum attempts for throttled or server errors
        retry_delay: Base delay between retries (seconds)
    """

    endpoint: str
    database_name: str = "timber"
    container_name: str = CONTAINER_NAME
    auth_method: str = AUTH_DEFAULT_CREDENTIAL
    key: str | None = None
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_delay: float = DEFAULT_RETRY_DELAY

    @classmethod
    def from_env(cls) -> CosmosConfig:
        """Create config from TIMBER_COSMOS_* environment variables."""
        endpoint = os.environ.get("TIMBER_COSMOS_ENDPOINT")
        database = os.environ.get("TIMBER_COSMOS_DATABASE", "timber")
        container = os.environ.get("TIMBER_COSMOS_CONTAINER", CONTAINER_NAME)
        auth_method = os.environ.get("TIMBER_COSMOS_AUTH_METHOD", AUTH_DEFAULT_CREDENTIAL)
        key = os.environ.get("TIMBER_COSMOS_KEY")

        if not endpoint:
            raise AuthenticationError("cosmos", "TIMBER_COSMOS_ENDPOINT not set")
        if auth_method == AUTH_KEY and not key:
            raise AuthenticationError("cosmos", "TIMBER_COSMOS_KEY required for key auth")

        return cls(
            endpoint=endpoint,
            database_name=database,
            container_name=container,
            auth_method=auth_method,
            key=key,
        )


class CosmosDocumentClient(RemoteDocumentClient):
    """Remote document client backed by Azure Cosmos DB.

    Throttling (429) and server errors (5xx) are retried with exponential
    backoff. Updates use ``patch_item`` so they never read before writing.
    """

    def __init__(self, config: CosmosConfig):
        self.config = config
        self._client: CosmosClient | None = None
        self._credential: DefaultAzureCredential | None = None
        self._database: DatabaseProxy | None = None
        self._container: ContainerProxy | None = None
        self._initialized = False

    async def initialize(self) -> None:
        """Initialize Cosmos connection and ensure the container exists."""
        if self._initialized:
            return

        try:
            if self.config.auth_method == AUTH_KEY:
                if not self.config.key:
                    raise AuthenticationError("cosmos", "Key required for key auth")
                self._client = CosmosClient(self.config.endpoint, credential=self.config.key)
            else:
                self._credential = DefaultAzureCredential()
                self._client = CosmosClient(self.config.endpoint, credential=self._credential)

            self._database = await self._client.create_database_if_not_exists(
                id=self.config.database_name
            )
            self._container = await self._database.create_container_if_not_exists(
                id=self.config.container_name,
                partition_key=PartitionKey(path="/user_id"),
            )

            self._initialized = True
            logger.info(f"Cosmos client initialized: {self.config.endpoint}")

        except AuthenticationError:
            raise
        except CosmosHttpResponseError as e:
            if e.status_code in (401, 403):
                raise AuthenticationError(self.config.endpoint, str(e)) from e
            raise StorageConnectionError(self.config.endpoint, e) from e
        except Exception as e:
            raise StorageConnectionError(self.config.endpoint, e) from e

    async def close(self) -> None:
        """Close Cosmos connections."""
        if self._client:
            await self._client.close()
            self._client = None

        if self._credential:
            await self._credential.close()
            self._credential = None

        self._database = None
        self._container = None
        self._initialized = False

    async def __aenter__(self) -> CosmosDocumentClient:
        await self.initialize()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    def _get_container(self) -> ContainerProxy:
        if not self._initialized or self._container is None:
            raise StorageIOError("get_container", cause=RuntimeError("Client not initialized"))
        return self._container

    @staticmethod
    def make_item_id(collection: str, document_id: str) -> str:
        return f"{collection}_{document_id}"

    @staticmethod
    def _to_document(item: dict[str, Any]) -> dict[str, Any]:
        """Strip Cosmos system and envelope fields, restoring the document id."""
        doc = {
            k: v for k, v in item.items() if not k.startswith("_") and k not in _ENVELOPE_KEYS
        }
        doc["id"] = item.get("doc_id", item.get("id"))
        if "_ts" in item:
            doc["updatedAt"] = format_datetime(datetime.fromtimestamp(item["_ts"], UTC))
        return doc

    # =========================================================================
    # Document operations
    # =========================================================================

    async def get(self, user_id: str, collection: str, document_id: str) -> dict[str, Any] | None:
        container = self._get_container()
        try:
            item = await self._with_retry(
                lambda: container.read_item(
                    item=self.make_item_id(collection, document_id), partition_key=user_id
                )
            )
        except CosmosResourceNotFoundError:
            return None
        return self._to_document(item)

    async def list_all(
        self,
        user_id: str,
        collection: str,
        order_by: str | None = None,
        descending: bool = True,
    ) -> list[dict[str, Any]]:
        container = self._get_container()
        query = "SELECT * FROM c WHERE c.user_id = @user_id AND c.collection = @collection"
        if order_by:
            direction = "DESC" if descending else "ASC"
            field = check_field_name(order_by)
            if field == "updatedAt":
                field = "_ts"
            query += f" ORDER BY c.{field} {direction}"
        parameters: list[dict[str, Any]] = [
            {"name": "@user_id", "value": user_id},
            {"name": "@collection", "value": collection},
        ]

        async def run_query() -> list[dict[str, Any]]:
            return [
                item
                async for item in container.query_items(
                    query=query, parameters=parameters, partition_key=user_id
                )
            ]

        items = await self._with_retry(run_query)
        return [self._to_document(item) for item in items]

    async def create(
        self,
        user_id: str,
        collection: str,
        record: dict[str, Any],
        document_id: str | None = None,
    ) -> str:
        container = self._get_container()
        document_id = document_id or uuid.uuid4().hex
        body = {
            **{k: v for k, v in record.items() if k not in _BACKEND_KEYS},
            "id": self.make_item_id(collection, document_id),
            "doc_id": document_id,
            "user_id": user_id,
            "collection": collection,
            "createdAt": format_datetime(utc_now()),
        }
        await self._with_retry(lambda: container.upsert_item(body=body))
        return document_id

    async def update(
        self,
        user_id: str,
        collection: str,
        document_id: str,
        fields: dict[str, Any],
    ) -> None:
        container = self._get_container()
        operations = [
            {"op": "set", "path": f"/{check_field_name(k)}", "value": v}
            for k, v in fields.items()
            if k not in _BACKEND_KEYS
        ]
        if not operations:
            return

        item_id = self.make_item_id(collection, document_id)
        try:
            for start in range(0, len(operations), MAX_PATCH_OPERATIONS):
                batch = operations[start : start + MAX_PATCH_OPERATIONS]
                await self._with_retry(
                    lambda batch=batch: container.patch_item(
                        item=item_id, partition_key=user_id, patch_operations=batch
                    )
                )
        except CosmosResourceNotFoundError as e:
            raise RecordNotFoundError(collection, document_id) from e

    async def delete(self, user_id: str, collection: str, document_id: str) -> None:
        container = self._get_container()
        try:
            await self._with_retry(
                lambda: container.delete_item(
                    item=self.make_item_id(collection, document_id), partition_key=user_id
                )
            )
        except CosmosResourceNotFoundError:
            logger.debug(f"Delete of missing document ignored: {collection}/{document_id}")

    async def delete_all(self, user_id: str, collection: str) -> int:
        documents = await self.list_all(user_id, collection)
        for doc in documents:
            await self.delete(user_id, collection, doc["id"])
        return len(documents)

    async def _with_retry(self, operation: Any) -> Any:
        """Execute an operation with retry logic for transient failures.

        Args:
            operation: Async callable to execute

        Returns:
            Result of the operation

        Raises:
            CosmosResourceNotFoundError: Passed through for callers to map
            StorageIOError: On client errors, or after max retries
        """
        last_error: Exception | None = None

        for attempt in range(self.config.max_retries):
            try:
                return await operation()
            except CosmosResourceNotFoundError:
                raise
            except CosmosHttpResponseError as e:
                # Don't retry client errors (4xx) other than throttling
                if 400 <= e.status_code < 500 and e.status_code != 429:
                    raise StorageIOError("cosmos_operation", cause=e) from e

                last_error = e
                if attempt < self.config.max_retries - 1:
                    delay = self.config.retry_delay * (2**attempt)
                    logger.warning(
                        f"Cosmos request failed with {e.status_code}, retrying in {delay}s"
                    )
                    await asyncio.sleep(delay)
            except Exception as e:
                # Don't retry unknown errors
                raise StorageIOError("cosmos_operation", cause=e) from e

        if last_error:
            raise StorageIOError("cosmos_operation", cause=last_error) from last_error
        raise StorageIOError("cosmos_operation", cause=RuntimeError("Unexpected retry failure"))
