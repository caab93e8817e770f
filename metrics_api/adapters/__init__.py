"""Provider query adapters."""

from metrics_api.adapters.analytics_adapter import AnalyticsAdapter
from metrics_api.adapters.base_adapter import BaseAdapter
from metrics_api.adapters.pushfire_adapter import PushFireAdapter
from metrics_api.adapters.somara_adapter import SomaraAdapter
from metrics_api.adapters.ulink_adapter import ULinkAdapter

__all__ = [
    "AnalyticsAdapter",
    "BaseAdapter",
    "PushFireAdapter",
    "SomaraAdapter",
    "ULinkAdapter",
]
