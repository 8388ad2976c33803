# ABOUTME: Explicit configuration for the Shamela API client.
# ABOUTME: Values come from the caller or from SHAMELA_* environment variables.

import os
from collections.abc import Mapping
from dataclasses import dataclass, fields

ENV_VARS = {
    "api_key": "SHAMELA_API_KEY",
    "books_endpoint": "SHAMELA_API_BOOKS_ENDPOINT",
    "master_patch_endpoint": "SHAMELA_API_MASTER_PATCH_ENDPOINT",
}


class ConfigError(ValueError):
    """Raised when a required configuration value is missing."""


@dataclass(frozen=True)
class ShamelaConfig:
    """Credentials and endpoints for the Shamela API."""

    api_key: str | None = None
    books_endpoint: str | None = None
    master_patch_endpoint: str | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ShamelaConfig":
        env = os.environ if environ is None else environ
        return cls(**{name: env.get(var) or None for name, var in ENV_VARS.items()})

    def with_overrides(self, **overrides: str | None) -> "ShamelaConfig":
        """Return a copy where every non-None override replaces the current value."""
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        values.update({k: v for k, v in overrides.items() if v is not None})
        return ShamelaConfig(**values)

    def require(self, name: str) -> str:
        """Return a configured value.

        Raises:
            ConfigError: If the value is not set.
        """
        value = getattr(self, name)
        if not value:
            raise ConfigError(f"{ENV_VARS[name]} environment variable not set")
        return value

    def validate(self) -> None:
        """Raise ConfigError naming every missing variable."""
        missing = [var for name, var in ENV_VARS.items() if not getattr(self, name)]
        if missing:
            raise ConfigError(f"{', '.join(missing)} environment variables not set")
