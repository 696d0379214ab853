"""Errors raised while resolving run configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence


class ConfigurationError(RuntimeError):
    """Configuration is present but unusable, or names an unknown client."""


class MissingConfigurationError(ConfigurationError):
    """Required settings for a client are absent or blank."""

    def __init__(self, client_key: str, names: Sequence[str]) -> None:
        self.client_key = client_key
        self.names = tuple(names)
        super().__init__(
            f'Missing configuration for client "{client_key}": {", ".join(self.names)}'
        )
