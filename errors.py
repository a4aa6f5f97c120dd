"""Exception hierarchy shared by gateways, meters and the HTTP layer."""

from __future__ import annotations


class MeterHubError(Exception):
    """Base class for all errors surfaced to API and CLI callers."""


class ConfigurationError(MeterHubError):
    """A required configuration value is missing or invalid."""


class GatewayConnectionError(MeterHubError):
    """A remote gateway could not be reached or returned unusable data."""


class InvalidRequestError(MeterHubError):
    """A required query parameter is missing or malformed."""


class InvalidUsageError(MeterHubError):
    """The configured usage tag is not one the meter can derive."""

    def __init__(self, usage: str) -> None:
        super().__init__(f"invalid usage: {usage}")
        self.usage = usage
