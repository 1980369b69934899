"""
Config file identity provider.

Reads identity from local configuration file for development
and offline-first usage.
"""

from pathlib import Path
from typing import Any

import yaml

from .provider import IdentityProvider
from .types import AuthProvider, IdentityState


class ConfigFileIdentityProvider(IdentityProvider):
    """Identity provider that reads from local config.

    Configuration in ~/.timber/settings.yaml:

    ```yaml
    identity:
      user_id: "user-abc123"
      display_name: "Alice Hunter"
    ```

    Without an identity section (or without user_id) the provider
    resolves to anonymous, local-only use.
    """

    def __init__(self, config_path: Path | None = None):
        """Initialize the config file provider.

        Args:
            config_path: Path to settings.yaml. Defaults to ~/.timber/settings.yaml
        """
        super().__init__()
        self.config_path = config_path or Path.home() / ".timber" / "settings.yaml"

    async def initialize(self) -> IdentityState:
        state = self._read_state()
        await self._publish(state)
        return state

    async def refresh(self) -> IdentityState:
        state = self._read_state()
        if state != self.state:
            await self._publish(state)
        return state

    async def sign_out(self) -> None:
        """Publish anonymous state.

        The config file is not modified; a later refresh() signs the
        configured user back in.
        """
        await self._publish(IdentityState.anonymous())

    @property
    def provider_type(self) -> AuthProvider:
        """Return CONFIG provider type."""
        return AuthProvider.CONFIG

    def _read_state(self) -> IdentityState:
        identity_config = self._load_config().get("identity") or {}
        user_id = identity_config.get("user_id")
        return IdentityState(
            user_id=str(user_id) if user_id else None,
            loading=False,
            display_name=identity_config.get("display_name"),
        )

    def _load_config(self) -> dict[str, Any]:
        """Load configuration from YAML file."""
        if not self.config_path.exists():
            return {}

        try:
            content = self.config_path.read_text()
            return yaml.safe_load(content) or {}
        except (OSError, yaml.YAMLError):
            return {}

    async def update_config(self, user_id: str | None, display_name: str | None = None) -> None:
        """Write the identity section and publish the resulting state.

        Passing ``user_id=None`` removes the configured user.
        """
        config = self._load_config()
        identity_config: dict[str, Any] = config.setdefault("identity", {})

        if user_id is None:
            identity_config.pop("user_id", None)
        else:
            identity_config["user_id"] = user_id
        if display_name is not None:
            identity_config["display_name"] = display_name

        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        self.config_path.write_text(yaml.safe_dump(config, default_flow_style=False))

        await self._publish(self._read_state())
