"""Exceptions raised by the relay.

Every one of these is caught at the top of :meth:`StreamingRelay.stream` and
reported to the client as a single ``[ERROR]`` frame.
"""

from __future__ import annotations


class RelayError(Exception):
    """Base class for relay failures."""


class ConfigurationError(RelayError):
    """Configuration file or override is unusable."""


class UnsupportedModelError(RelayError):
    """Logical model name is not in the model table."""

    def __init__(self, model: str) -> None:
        super().__init__(f"Unsupported model: {model}")
        self.model = model


class ProviderNotConfiguredError(RelayError):
    """The selected provider has no client because its API key is missing."""

    def __init__(self, display_name: str, env_var: str) -> None:
        super().__init__(
            f"{display_name} was not initialized because {env_var} was not provided"
        )
        self.env_var = env_var
