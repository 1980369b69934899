"""
Tests for CosmosDocumentClient.

Most tests run against a mocked container. TestCosmosLive talks to a real
account and requires TIMBER_COSMOS_* environment variables to be set.
"""

import os
import uuid
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from azure.cosmos.exceptions import CosmosHttpResponseError, CosmosResourceNotFoundError

from timber_storage.exceptions import (
    AuthenticationError,
    RecordNotFoundError,
    StorageIOError,
    ValidationError,
)
from timber_storage.remote import CosmosConfig, CosmosDocumentClient
from timber_storage.remote.cosmos import MAX_PATCH_OPERATIONS


def _query_results(items):
    async def results(*args, **kwargs):
        for item in items:
            yield item

    return results


@pytest.fixture
def container():
    container = MagicMock()
    container.read_item = AsyncMock()
    container.upsert_item = AsyncMock()
    container.patch_item = AsyncMock()
    container.delete_item = AsyncMock()
    container.query_items = MagicMock(side_effect=_query_results([]))
    return container


@pytest.fixture
def client(container):
    """Client wired to a mocked container, with no retry delay."""
    client = CosmosDocumentClient(
        CosmosConfig(endpoint="https://test.documents.azure.com", retry_delay=0)
    )
    client._container = container
    client._initialized = True
    return client


class TestCosmosConfig:
    """Tests for CosmosConfig.from_env."""

    def test_from_env(self):
        env = {
            "TIMBER_COSMOS_ENDPOINT": "https://acct.documents.azure.com",
            "TIMBER_COSMOS_AUTH_METHOD": "key",
            "TIMBER_COSMOS_KEY": "secret",
        }
        with patch.dict(os.environ, env, clear=True):
            config = CosmosConfig.from_env()

        assert config.endpoint == "https://acct.documents.azure.com"
        assert config.database_name == "timber"
        assert config.container_name == "timber_data"
        assert config.key == "secret"

    def test_missing_endpoint(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(AuthenticationError):
                CosmosConfig.from_env()

    def test_key_auth_requires_key(self):
        env = {"TIMBER_COSMOS_ENDPOINT": "https://acct", "TIMBER_COSMOS_AUTH_METHOD": "key"}
        with patch.dict(os.environ, env, clear=True):
            with pytest.raises(AuthenticationError):
                CosmosConfig.from_env()


class TestCosmosDocumentClient:
    """Tests for document operations against a mocked container."""

    @pytest.mark.asyncio
    async def test_uninitialized_client(self):
        client = CosmosDocumentClient(CosmosConfig(endpoint="https://test"))
        with pytest.raises(StorageIOError):
            await client.get("u1", "inventory", "a")

    @pytest.mark.asyncio
    async def test_get_strips_envelope(self, client, container):
        """Documents come back keyed by their own id without Cosmos fields."""
        container.read_item.return_value = {
            "id": "inventory_a",
            "doc_id": "a",
            "user_id": "u1",
            "collection": "inventory",
            "name": "Shotgun",
            "_etag": "xyz",
            "_ts": 1761975000,
        }

        doc = await client.get("u1", "inventory", "a")

        assert doc == {"id": "a", "name": "Shotgun", "updatedAt": "2025-11-01T05:30:00+00:00"}
        container.read_item.assert_awaited_once_with(item="inventory_a", partition_key="u1")

    @pytest.mark.asyncio
    async def test_get_missing(self, client, container):
        container.read_item.side_effect = CosmosResourceNotFoundError(status_code=404, message="gone")
        assert await client.get("u1", "inventory", "a") is None

    @pytest.mark.asyncio
    async def test_create_builds_envelope(self, client, container):
        doc_id = await client.create("u1", "huntLogs", {"id": "ignored", "date": "2025-11-02"}, "log-1")

        body = container.upsert_item.await_args.kwargs["body"]
        assert doc_id == "log-1"
        assert body["id"] == "huntLogs_log-1"
        assert body["doc_id"] == "log-1"
        assert body["user_id"] == "u1"
        assert body["collection"] == "huntLogs"
        assert body["date"] == "2025-11-02"
        assert body["createdAt"]
        assert "updatedAt" not in body

    @pytest.mark.asyncio
    async def test_updated_at_comes_from_server_timestamp(self, client, container):
        """A client-supplied updatedAt is replaced by the server's _ts on read."""
        container.query_items.side_effect = _query_results(
            [{"id": "inventory_a", "doc_id": "a", "updatedAt": "2099-01-01T00:00:00+00:00", "_ts": 1761975000}]
        )

        docs = await client.list_all("u1", "inventory", order_by="updatedAt")

        assert docs[0]["updatedAt"] == "2025-11-01T05:30:00+00:00"
        assert container.query_items.call_args.kwargs["query"].endswith("ORDER BY c._ts DESC")

    @pytest.mark.asyncio
    async def test_list_all_query(self, client, container):
        container.query_items.side_effect = _query_results(
            [{"id": "huntLogs_l1", "doc_id": "l1", "date": "2025-11-02"}]
        )

        docs = await client.list_all("u1", "huntLogs", order_by="date")

        assert docs == [{"id": "l1", "date": "2025-11-02"}]
        kwargs = container.query_items.call_args.kwargs
        assert kwargs["query"].endswith("ORDER BY c.date DESC")
        assert kwargs["partition_key"] == "u1"
        assert {"name": "@collection", "value": "huntLogs"} in kwargs["parameters"]

    @pytest.mark.asyncio
    async def test_list_all_rejects_injection(self, client):
        with pytest.raises(ValidationError):
            await client.list_all("u1", "huntLogs", order_by="date DESC; --")

    @pytest.mark.asyncio
    async def test_update_chunks_patch_operations(self, client, container):
        """Large updates are split to stay under the patch operation limit."""
        fields = {f"field{i}": i for i in range(MAX_PATCH_OPERATIONS + 2)}

        await client.update("u1", "profile", "data", fields)

        batches = [call.kwargs["patch_operations"] for call in container.patch_item.await_args_list]
        assert [len(b) for b in batches] == [MAX_PATCH_OPERATIONS, 2]
        assert all(op["path"] != "/updatedAt" for batch in batches for op in batch)
        assert container.patch_item.await_args.kwargs["item"] == "profile_data"

    @pytest.mark.asyncio
    async def test_update_missing_document(self, client, container):
        container.patch_item.side_effect = CosmosResourceNotFoundError(status_code=404, message="gone")

        with pytest.raises(RecordNotFoundError):
            await client.update("u1", "inventory", "a", {"quantity": 2})

    @pytest.mark.asyncio
    async def test_delete_missing_is_noop(self, client, container):
        container.delete_item.side_effect = CosmosResourceNotFoundError(status_code=404, message="gone")
        await client.delete("u1", "inventory", "a")

    @pytest.mark.asyncio
    async def test_delete_all(self, client, container):
        container.query_items.side_effect = _query_results(
            [{"id": "inventory_a", "doc_id": "a"}, {"id": "inventory_b", "doc_id": "b"}]
        )

        assert await client.delete_all("u1", "inventory") == 2
        deleted = [call.kwargs["item"] for call in container.delete_item.await_args_list]
        assert deleted == ["inventory_a", "inventory_b"]


class TestCosmosRetry:
    """Tests for retry behaviour."""

    @pytest.mark.asyncio
    async def test_retries_throttling(self, client, container):
        container.upsert_item.side_effect = [
            CosmosHttpResponseError(status_code=429, message="throttled"),
            {"id": "inventory_a"},
        ]

        await client.create("u1", "inventory", {"name": "Shotgun"}, "a")

        assert container.upsert_item.await_count == 2

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self, client, container):
        container.upsert_item.side_effect = CosmosHttpResponseError(status_code=503, message="down")

        with pytest.raises(StorageIOError):
            await client.create("u1", "inventory", {"name": "Shotgun"}, "a")

        assert container.upsert_item.await_count == client.config.max_retries

    @pytest.mark.asyncio
    async def test_client_errors_are_not_retried(self, client, container):
        container.upsert_item.side_effect = CosmosHttpResponseError(status_code=400, message="bad")

        with pytest.raises(StorageIOError):
            await client.create("u1", "inventory", {"name": "Shotgun"}, "a")

        assert container.upsert_item.await_count == 1


@pytest.mark.cosmos
@pytest.mark.skipif(
    not os.environ.get("TIMBER_COSMOS_ENDPOINT"),
    reason="TIMBER_COSMOS_ENDPOINT not set",
)
class TestCosmosLive:
    """Round trip against a real Cosmos DB account."""

    @pytest.fixture
    async def live_client(self):
        client = CosmosDocumentClient(CosmosConfig.from_env())
        await client.initialize()
        yield client
        await client.close()

    @pytest.mark.asyncio
    async def test_document_lifecycle(self, live_client):
        user_id = f"test-user-{uuid.uuid4().hex[:8]}"

        doc_id = await live_client.create(user_id, "inventory", {"name": "Shotgun", "quantity": 1})
        await live_client.update(user_id, "inventory", doc_id, {"quantity": 2})

        doc = await live_client.get(user_id, "inventory", doc_id)
        assert doc["quantity"] == 2
        assert [d["id"] for d in await live_client.list_all(user_id, "inventory")] == [doc_id]

        assert await live_client.delete_all(user_id, "inventory") == 1
        assert await live_client.get(user_id, "inventory", doc_id) is None
