"""
Pure transforms from raw provider rows to canonical metrics bundles.

No I/O happens here; every function is deterministic given its inputs.
"""

from metrics_api.engine.transforms.analytics import transform_ga_bundle
from metrics_api.engine.transforms.pushfire import transform_pushfire_metrics
from metrics_api.engine.transforms.series import forward_fill, safe_rate, zero_fill
from metrics_api.engine.transforms.somara import transform_somara_metrics
from metrics_api.engine.transforms.ulink import (
    calculate_mrr,
    compute_health_score,
    transform_business_metrics,
    transform_client_health,
)

__all__ = [
    "calculate_mrr",
    "compute_health_score",
    "forward_fill",
    "safe_rate",
    "transform_business_metrics",
    "transform_client_health",
    "transform_ga_bundle",
    "transform_pushfire_metrics",
    "transform_somara_metrics",
    "zero_fill",
]
