"""Custom exceptions for CloudFront invalidation orchestration."""

from typing import Optional


class InvalidationError(Exception):
    """Base exception for invalidation errors."""

    pass


class RemoteError(InvalidationError):
    """CloudFront API call failed (network, auth, throttling, server error)."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code


class InvalidationNotFoundError(InvalidationError):
    """CloudFront reports the invalidation no longer exists."""

    def __init__(self, distribution_id: str, invalidation_id: str):
        super().__init__(f"Invalidation {invalidation_id} not found on distribution {distribution_id}")
        self.distribution_id = distribution_id
        self.invalidation_id = invalidation_id


class ConfigurationError(InvalidationError):
    """Configuration or environment variable errors."""

    pass


class IdentifierEncodingError(InvalidationError):
    """Composite invalidation identifier could not be decoded."""

    pass
