"""
Pydantic v2 data models for the metrics service.

Model Organization:
    - common: camelCase value-object base, raw-row base, coercion types
    - enums: products, metric types, health scores
    - analytics: report filter, raw report rows, GA metrics bundle
    - ulink: ULink raw rows, business bundle, client-health bundle
    - pushfire: PushFire raw rows and platform bundle
    - somara: Somara raw rows and platform bundle
    - envelope: uniform response envelope

Raw-row models coerce upstream values at the boundary (null → 0, numeric
strings → numbers). Bundle models are frozen and serialize to camelCase.
"""

from metrics_api.models.analytics import GAMetricsBundle, ReportFilter
from metrics_api.models.enums import HealthScore, MetricType, ProductSlug
from metrics_api.models.envelope import MetricsResponse
from metrics_api.models.pushfire import PushFireMetrics
from metrics_api.models.somara import SomaraMetrics
from metrics_api.models.ulink import ULinkBusinessMetrics, ULinkClientHealth

__all__ = [
    "GAMetricsBundle",
    "HealthScore",
    "MetricType",
    "MetricsResponse",
    "ProductSlug",
    "PushFireMetrics",
    "ReportFilter",
    "SomaraMetrics",
    "ULinkBusinessMetrics",
    "ULinkClientHealth",
]
