"""Bundle fetching, transforms and cache orchestration."""

from metrics_api.engine.bundles import BundleFetcher
from metrics_api.engine.orchestrator import MetricsOrchestrator

__all__ = ["BundleFetcher", "MetricsOrchestrator"]
