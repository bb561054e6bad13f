"""Custom exceptions for reasoning provider operations."""


class ProviderAPIError(Exception):
    """Raised when a reasoning service call fails."""
    pass


class ProviderConfigError(Exception):
    """Raised when provider configuration is invalid."""
    pass
