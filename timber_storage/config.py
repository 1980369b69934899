"""
Configuration for timber storage.

Settings come from environment variables (``TIMBER_*``) or from the
``storage`` section of ~/.timber/settings.yaml:

```yaml
storage:
  local_path: ~/.timber/local
  remote_backend: cosmos        # none | memory | cosmos | firestore
  saved_locations_limit: 10
  cosmos:
    endpoint: https://example.documents.azure.com:443/
    database: timber
    auth_method: default_credential   # or "key"
  firestore:
    credentials_path: ~/.timber/service-account.json
    project_id: talkin-timber

logging:
  format: json                  # text | json; omit to leave logging to the host
  level: INFO
```
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from .exceptions import ValidationError
from .logging_utils import LOG_FORMATS
from .remote.cosmos import AUTH_DEFAULT_CREDENTIAL, AUTH_KEY, CONTAINER_NAME, CosmosConfig

DEFAULT_SETTINGS_PATH = Path.home() / ".timber" / "settings.yaml"
DEFAULT_LOCAL_PATH = Path.home() / ".timber" / "local"


class RemoteBackend(Enum):
    NONE = "none"
    MEMORY = "memory"
    COSMOS = "cosmos"
    FIRESTORE = "firestore"


@dataclass
class FirestoreSettings:
    credentials_path: str | None = None
    project_id: str | None = None


@dataclass
class TimberConfig:
    """Top-level configuration.

    Attributes:
        local_path: Directory for local JSON blobs
        remote_backend: Which remote document store to use
        cosmos: Cosmos settings (required for the cosmos backend)
        firestore: Firestore settings
        saved_locations_limit: Maximum saved locations kept in the profile
        log_format: "text" or "json" to configure package logging, None to leave it alone
        log_level: Level name for package logging
    """

    local_path: Path = DEFAULT_LOCAL_PATH
    remote_backend: RemoteBackend = RemoteBackend.NONE
    cosmos: CosmosConfig | None = None
    firestore: FirestoreSettings = field(default_factory=FirestoreSettings)
    saved_locations_limit: int = 10
    log_format: str | None = None
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.log_format is not None:
            self.log_format = self.log_format.strip().lower()
            if self.log_format not in LOG_FORMATS:
                raise ValidationError("log_format", "must be 'text' or 'json'", self.log_format)
        self.log_level = self.log_level.strip().upper()
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ValidationError("log_level", "unknown level", self.log_level)
        if self.saved_locations_limit < 1:
            raise ValidationError(
                "saved_locations_limit", "must be at least 1", str(self.saved_locations_limit)
            )
        if self.remote_backend is RemoteBackend.COSMOS and self.cosmos is None:
            raise ValidationError("cosmos", "cosmos settings required for the cosmos backend")

    @classmethod
    def from_environment(cls) -> TimberConfig:
        """Create config from TIMBER_* environment variables."""
        backend = _parse_backend(os.environ.get("TIMBER_REMOTE_BACKEND", "none"))
        local_path = os.environ.get("TIMBER_LOCAL_PATH")

        return cls(
            local_path=Path(local_path).expanduser() if local_path else DEFAULT_LOCAL_PATH,
            remote_backend=backend,
            cosmos=CosmosConfig.from_env() if backend is RemoteBackend.COSMOS else None,
            firestore=FirestoreSettings(
                credentials_path=os.environ.get("TIMBER_FIRESTORE_CREDENTIALS"),
                project_id=os.environ.get("TIMBER_FIRESTORE_PROJECT"),
            ),
            saved_locations_limit=int(os.environ.get("TIMBER_SAVED_LOCATIONS_LIMIT", "10")),
            log_format=os.environ.get("TIMBER_LOG_FORMAT") or None,
            log_level=os.environ.get("TIMBER_LOG_LEVEL", "INFO"),
        )

    @classmethod
    def from_settings_file(cls, path: Path | None = None) -> TimberConfig:
        """Create config from the ``storage`` section of a YAML settings file.

        A missing file yields the defaults (local-only).
        """
        path = path or DEFAULT_SETTINGS_PATH
        data: dict[str, Any] = {}
        if path.exists():
            try:
                data = yaml.safe_load(path.read_text()) or {}
            except yaml.YAMLError as e:
                raise ValidationError("settings", f"invalid YAML in {path}: {e}") from e

        storage = data.get("storage") or {}
        backend = _parse_backend(storage.get("remote_backend", "none"))

        cosmos = None
        cosmos_data = storage.get("cosmos") or {}
        if cosmos_data.get("endpoint"):
            auth_method = cosmos_data.get("auth_method", AUTH_DEFAULT_CREDENTIAL)
            if auth_method not in (AUTH_KEY, AUTH_DEFAULT_CREDENTIAL):
                raise ValidationError("cosmos.auth_method", "must be 'key' or 'default_credential'", auth_method)
            cosmos = CosmosConfig(
                endpoint=cosmos_data["endpoint"],
                database_name=cosmos_data.get("database", "timber"),
                container_name=cosmos_data.get("container", CONTAINER_NAME),
                auth_method=auth_method,
                key=cosmos_data.get("key"),
            )

        firestore_data = storage.get("firestore") or {}
        credentials_path = firestore_data.get("credentials_path")

        log_settings = data.get("logging") or {}

        local_path = storage.get("local_path")
        return cls(
            local_path=Path(local_path).expanduser() if local_path else DEFAULT_LOCAL_PATH,
            remote_backend=backend,
            cosmos=cosmos,
            firestore=FirestoreSettings(
                credentials_path=str(Path(credentials_path).expanduser()) if credentials_path else None,
                project_id=firestore_data.get("project_id"),
            ),
            saved_locations_limit=int(storage.get("saved_locations_limit", 10)),
            log_format=log_settings.get("format"),
            log_level=str(log_settings.get("level", "INFO")),
        )


def _parse_backend(value: str) -> RemoteBackend:
    try:
        return RemoteBackend(str(value).strip().lower())
    except ValueError as e:
        raise ValidationError("remote_backend", "unknown backend", str(value)) from e
