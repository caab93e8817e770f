"""
Upstream provider clients.

- GoogleAnalyticsClient: Analytics Data API runReport
- SupabaseRestClient: PostgREST reads against a platform database

Clients are created once by the service container and injected into the
adapters; they translate transport failures into ProviderError subclasses.
"""

from metrics_api.connectors.errors import (
    ProviderAuthError,
    ProviderConfigError,
    ProviderError,
    ProviderResponseError,
    ProviderUnavailableError,
)
from metrics_api.connectors.google_analytics import (
    GoogleAnalyticsClient,
    ServiceAccountTokenProvider,
)
from metrics_api.connectors.supabase_rest import SupabaseRestClient

__all__ = [
    "GoogleAnalyticsClient",
    "ProviderAuthError",
    "ProviderConfigError",
    "ProviderError",
    "ProviderResponseError",
    "ProviderUnavailableError",
    "ServiceAccountTokenProvider",
    "SupabaseRestClient",
]
