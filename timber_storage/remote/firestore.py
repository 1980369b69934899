"""
Firestore remote document client.

Documents live at ``users/{uid}/{collection}/{id}``, with ``createdAt``
and ``updatedAt`` set by the server.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Any

import firebase_admin
from firebase_admin import credentials, firestore, firestore_async
from google.api_core import exceptions as google_exceptions

from ..exceptions import RecordNotFoundError, StorageConnectionError
from ..models import format_datetime
from .base import RemoteDocumentClient, check_field_name

logger = logging.getLogger(__name__)

USERS_COLLECTION = "users"

_BACKEND_KEYS = ("id", "createdAt", "updatedAt")


class FirestoreDocumentClient(RemoteDocumentClient):
    """Remote document client backed by Cloud Firestore.

    Args:
        credentials_path: Service account JSON. Application default
            credentials are used when omitted.
        project_id: Optional project override
        db: An existing async Firestore client (tests, custom apps)
    """

    def __init__(
        self,
        credentials_path: str | None = None,
        project_id: str | None = None,
        db: Any = None,
    ):
        self.credentials_path = credentials_path
        self.project_id = project_id
        self._db = db

    async def initialize(self) -> None:
        if self._db is not None:
            return
        if not firebase_admin._apps:
            cred = (
                credentials.Certificate(self.credentials_path)
                if self.credentials_path
                else credentials.ApplicationDefault()
            )
            options = {"projectId": self.project_id} if self.project_id else None
            firebase_admin.initialize_app(cred, options)
            logger.info("Firebase app initialized for Firestore document client")
        self._db = firestore_async.client()

    async def close(self) -> None:
        if self._db is not None:
            self._db.close()
            self._db = None

    def _collection(self, user_id: str, collection: str) -> Any:
        if self._db is None:
            raise StorageConnectionError("firestore", RuntimeError("Client not initialized"))
        return self._db.collection(USERS_COLLECTION).document(user_id).collection(collection)

    @staticmethod
    def _to_document(snapshot: Any) -> dict[str, Any]:
        data = snapshot.to_dict() or {}
        for key in ("createdAt", "updatedAt"):
            if isinstance(data.get(key), datetime):
                data[key] = format_datetime(data[key])
        data["id"] = snapshot.id
        return data

    async def get(self, user_id: str, collection: str, document_id: str) -> dict[str, Any] | None:
        ref = self._collection(user_id, collection).document(document_id)
        try:
            snapshot = await ref.get()
        except google_exceptions.GoogleAPICallError as e:
            raise StorageConnectionError("firestore", e) from e
        return self._to_document(snapshot) if snapshot.exists else None

    async def list_all(
        self,
        user_id: str,
        collection: str,
        order_by: str | None = None,
        descending: bool = True,
    ) -> list[dict[str, Any]]:
        query = self._collection(user_id, collection)
        if order_by:
            direction = firestore.Query.DESCENDING if descending else firestore.Query.ASCENDING
            query = query.order_by(check_field_name(order_by), direction=direction)
        try:
            return [self._to_document(snapshot) async for snapshot in query.stream()]
        except google_exceptions.GoogleAPICallError as e:
            raise StorageConnectionError("firestore", e) from e

    async def create(
        self,
        user_id: str,
        collection: str,
        record: dict[str, Any],
        document_id: str | None = None,
    ) -> str:
        document_id = document_id or uuid.uuid4().hex[:20]
        body = {k: v for k, v in record.items() if k not in _BACKEND_KEYS}
        body["id"] = document_id
        body["createdAt"] = firestore.SERVER_TIMESTAMP
        body["updatedAt"] = firestore.SERVER_TIMESTAMP
        ref = self._collection(user_id, collection).document(document_id)
        try:
            await ref.set(body)
        except google_exceptions.GoogleAPICallError as e:
            raise StorageConnectionError("firestore", e) from e
        return document_id

    async def update(
        self,
        user_id: str,
        collection: str,
        document_id: str,
        fields: dict[str, Any],
    ) -> None:
        changes = {check_field_name(k): v for k, v in fields.items() if k not in _BACKEND_KEYS}
        changes["updatedAt"] = firestore.SERVER_TIMESTAMP
        ref = self._collection(user_id, collection).document(document_id)
        try:
            await ref.update(changes)
        except google_exceptions.NotFound as e:
            raise RecordNotFoundError(collection, document_id) from e
        except google_exceptions.GoogleAPICallError as e:
            raise StorageConnectionError("firestore", e) from e

    async def delete(self, user_id: str, collection: str, document_id: str) -> None:
        ref = self._collection(user_id, collection).document(document_id)
        try:
            await ref.delete()
        except google_exceptions.GoogleAPICallError as e:
            raise StorageConnectionError("firestore", e) from e

    async def delete_all(self, user_id: str, collection: str) -> int:
        count = 0
        try:
            async for snapshot in self._collection(user_id, collection).stream():
                await snapshot.reference.delete()
                count += 1
        except google_exceptions.GoogleAPICallError as e:
            raise StorageConnectionError("firestore", e) from e
        return count
