"""
Exceptions raised by the adapter and aggregation layer.

Everything a single account can fail with derives from `CloudMonError`, so
the batch orchestrator can turn any of them into a per-account result.
"""

from typing import Optional


class CloudMonError(Exception):
    """Base exception for cloudmon errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self):
        return self.message


class ValidationError(CloudMonError):
    """Raised when an account descriptor is unusable. No upstream call is made."""
    pass


class MissingTokenError(ValidationError):
    """Raised when the token is empty after normalization."""

    def __init__(self, message: str = "Missing account token"):
        super().__init__(message)


class InvalidDescriptorError(ValidationError):
    """Raised when an account descriptor is malformed."""
    pass


class UnsupportedProviderError(CloudMonError):
    """Raised when no connector is registered for a provider identifier."""

    def __init__(self, provider: str):
        super().__init__(f"Unsupported provider: {provider}")
        self.provider = provider


class ProviderError(CloudMonError):
    """Raised when a provider call fails."""

    def __init__(self, message: str, provider: str):
        super().__init__(message)
        self.provider = provider


class ProviderTimeoutError(ProviderError):
    """Raised when a provider call exceeds its time bound."""

    def __init__(self, message: str, provider: str, timeout: Optional[float] = None):
        super().__init__(message, provider)
        self.timeout = timeout


class TransportError(ProviderError):
    """Raised on network or connection failures."""
    pass


class UpstreamError(ProviderError):
    """Raised on a non-success HTTP status or a GraphQL `errors` payload."""

    def __init__(self, message: str, provider: str, status_code: Optional[int] = None):
        super().__init__(message, provider)
        self.status_code = status_code


class ParseError(ProviderError):
    """Raised when a response body is not the JSON we required."""
    pass
