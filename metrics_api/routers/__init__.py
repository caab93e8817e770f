"""API routers."""

from metrics_api.routers import metrics, pushfire, somara, system, ulink

__all__ = ["metrics", "pushfire", "somara", "system", "ulink"]
