"""Domain exceptions."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from tunescout.domain.entities import Platform


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    # Hey future me, message is stored as an attribute so callers can inspect it without parsing
    # str(exception). Don't raise this directly - always use a specific subclass.
    def __init__(self, message: str, *args: Any) -> None:
        super().__init__(message, *args)
        self.message = message


class ValidationException(DomainException):
    """Raised when caller input fails validation."""

    pass


class InvalidQueryError(ValidationException):
    """Search query is empty, blank, or names a platform that isn't enabled.

    Raised BEFORE any provider is contacted.
    """

    def __init__(self, message: str = "Search query is required") -> None:
        super().__init__(message)


class ConfigurationError(DomainException):
    """Application misconfiguration (missing credentials, no providers)."""

    pass


class ExternalServiceError(DomainException):
    """An external catalog API call failed."""

    pass


class TokenExchangeError(ExternalServiceError):
    """Client-credentials exchange against a token endpoint failed.

    The calling adapter treats this as ITS failure only - sibling providers
    keep running.
    """

    def __init__(
        self,
        message: str = "Token exchange failed",
        error_code: str | None = None,
        http_status: int | None = None,
    ) -> None:
        super().__init__(message)
        self.error_code = error_code  # e.g. "invalid_client"
        self.http_status = http_status  # e.g. 400, 401

    @property
    def is_credentials_problem(self) -> bool:
        """Check if retrying with the same credentials is pointless."""
        return self.error_code in ("invalid_client", "unauthorized_client") or (
            self.http_status in (400, 401, 403)
        )


class RateLimitExceededError(ExternalServiceError):
    """Provider kept answering HTTP 429 after all retries."""

    def __init__(self, message: str, retry_after: float | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class ProviderError(ExternalServiceError):
    """One provider's search failed (network, non-2xx, malformed payload, token, timeout).

    Recovered by the aggregator: the platform is left out of the merged
    result and the error is reported in its partial-failure metadata.
    """

    def __init__(
        self,
        platform: Platform,
        cause: BaseException | str,
        detail: str | None = None,
    ) -> None:
        self.detail = detail or str(cause) or cause.__class__.__name__
        super().__init__(f"{platform.display_name} search failed: {self.detail}")
        self.platform = platform
        self.cause = cause


class AllProvidersFailedError(ExternalServiceError):
    """Every enabled provider failed for one aggregate search."""

    def __init__(self, errors: Sequence[ProviderError]) -> None:
        details = "; ".join(f"{e.platform.value}: {e.detail}" for e in errors)
        super().__init__(f"All {len(errors)} search providers failed ({details})")
        self.errors: list[ProviderError] = list(errors)

    @property
    def platforms(self) -> list[Platform]:
        """Platforms that failed, in reporting order."""
        return [error.platform for error in self.errors]


__all__ = [
    "AllProvidersFailedError",
    "ConfigurationError",
    "DomainException",
    "ExternalServiceError",
    "InvalidQueryError",
    "ProviderError",
    "RateLimitExceededError",
    "TokenExchangeError",
    "ValidationException",
]
