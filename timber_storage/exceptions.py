"""
Custom exceptions for timber storage.

Stores and backends raise these exceptions for consistent
error handling across local and remote persistence.
"""


class TimberStorageError(Exception):
    """Base exception for all timber storage errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class RecordNotFoundError(TimberStorageError):
    """Raised when a record is not found in the active backing store."""

    def __init__(self, collection: str, record_id: str):
        super().__init__(
            f"{collection} record not found: {record_id}",
            {"collection": collection, "record_id": record_id},
        )
        self.collection = collection
        self.record_id = record_id


class StoreNotLoadedError(TimberStorageError):
    """Raised when store state is read or written while it is still loading."""

    def __init__(self, store: str):
        super().__init__(f"Store not loaded yet: {store}", {"store": store})
        self.store = store


class StorageIOError(TimberStorageError):
    """Raised when a storage I/O operation fails."""

    def __init__(self, operation: str, path: str | None = None, cause: Exception | None = None):
        details = {"operation": operation}
        if path:
            details["path"] = path
        if cause:
            details["cause"] = str(cause)
        message = f"Storage I/O error during {operation}"
        if path:
            message += f": {path}"
        super().__init__(message, details)
        self.operation = operation
        self.path = path
        self.cause = cause


class SyncError(TimberStorageError):
    """Raised when a remote write on the best-effort path fails."""

    def __init__(self, message: str, collection: str | None = None, cause: Exception | None = None):
        details: dict = {}
        if collection:
            details["collection"] = collection
        if cause:
            details["cause"] = str(cause)
        super().__init__(message, details)
        self.collection = collection
        self.cause = cause


class StorageConnectionError(TimberStorageError):
    """Raised when connection to remote storage fails.

    Note: Named StorageConnectionError to avoid shadowing the builtin ConnectionError.
    """

    def __init__(self, endpoint: str, cause: Exception | None = None):
        details = {"endpoint": endpoint}
        if cause:
            details["cause"] = str(cause)
        super().__init__(f"Connection failed to {endpoint}", details)
        self.endpoint = endpoint
        self.cause = cause


class AuthenticationError(TimberStorageError):
    """Raised when authentication to remote storage fails."""

    def __init__(self, endpoint: str, reason: str | None = None):
        details = {"endpoint": endpoint}
        if reason:
            details["reason"] = reason
        super().__init__(f"Authentication failed for {endpoint}", details)
        self.endpoint = endpoint
        self.reason = reason


class ValidationError(TimberStorageError):
    """Raised when record validation fails."""

    def __init__(self, field: str, reason: str, value: str | None = None):
        details = {"field": field, "reason": reason}
        if value is not None:
            details["value"] = value
        super().__init__(f"Validation failed for {field}: {reason}", details)
        self.field = field
        self.reason = reason
        self.value = value
