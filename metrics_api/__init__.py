"""
Product metrics aggregation service.

Aggregates web-analytics and platform-database metrics for each product
behind a unified read API, with a short-lived cache and stale-cache
fallback when upstreams fail.
"""

__version__ = "0.1.0"
