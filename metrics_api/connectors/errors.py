"""
Upstream failure taxonomy.

"No data" is never an error; these exceptions signal that an upstream
could not be reached, refused the credentials, or answered with something
unusable. The orchestrator treats every ProviderError as a failed fetch and
applies the stale-cache fallback.
"""

from typing import Optional

import httpx


class ProviderError(Exception):
    """Base exception for upstream provider failures."""

    def __init__(self, provider: str, message: str, status_code: Optional[int] = None):
        self.provider = provider
        self.status_code = status_code
        super().__init__(f"[{provider}] {message}")


class ProviderConfigError(ProviderError):
    """Raised when a provider's credentials or endpoint are not configured."""

    pass


class ProviderAuthError(ProviderError):
    """Raised when a provider rejects the credentials (401/403)."""

    pass


class ProviderUnavailableError(ProviderError):
    """Raised on transport failures, timeouts, quota exhaustion and 5xx."""

    pass


class ProviderResponseError(ProviderError):
    """Raised when a provider answers with a payload that cannot be used."""

    pass


def translate_http_error(provider: str, error: Exception) -> ProviderError:
    """Map an httpx exception onto the provider failure taxonomy."""
    if isinstance(error, httpx.HTTPStatusError):
        code = error.response.status_code
        if code in (401, 403):
            return ProviderAuthError(provider, f"authentication rejected ({code})", code)
        if code == 429 or code >= 500:
            return ProviderUnavailableError(provider, f"upstream unavailable ({code})", code)
        return ProviderResponseError(provider, f"request rejected ({code})", code)
    if isinstance(error, httpx.TimeoutException):
        return ProviderUnavailableError(provider, "request timed out")
    if isinstance(error, httpx.RequestError):
        return ProviderUnavailableError(provider, f"transport error: {error.__class__.__name__}")
    return ProviderResponseError(provider, str(error))
