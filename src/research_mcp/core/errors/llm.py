"""Completion provider error classes."""

from typing import Optional


class LLMError(Exception):
    """Base exception for completion calls.

    Attributes:
        message: Human-readable error description
        provider: Name of the provider that raised the error
        retryable: Whether the operation can be retried
        status_code: HTTP status code if applicable
    """

    def __init__(
        self,
        message: str,
        *,
        provider: Optional[str] = None,
        retryable: bool = False,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.provider = provider
        self.retryable = retryable
        self.status_code = status_code


class RateLimitError(LLMError):
    """Rate limit exceeded error.

    Attributes:
        retry_after: Seconds to wait before retrying
    """

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        *,
        provider: Optional[str] = None,
        retry_after: Optional[float] = None,
    ):
        super().__init__(message, provider=provider, retryable=True, status_code=429)
        self.retry_after = retry_after


class AuthenticationError(LLMError):
    """Authentication failed error."""

    def __init__(
        self,
        message: str = "Authentication failed",
        *,
        provider: Optional[str] = None,
    ):
        super().__init__(message, provider=provider, retryable=False, status_code=401)


class InvalidRequestError(LLMError):
    """Invalid request error (bad parameters, context too long, etc.)."""

    def __init__(
        self,
        message: str,
        *,
        provider: Optional[str] = None,
        status_code: int = 400,
    ):
        super().__init__(message, provider=provider, retryable=False, status_code=status_code)


class ProviderNotConfiguredError(LLMError):
    """Raised when a completion backend is requested but its settings are incomplete."""

    def __init__(self, message: str, *, provider: Optional[str] = None):
        super().__init__(message, provider=provider, retryable=False)
