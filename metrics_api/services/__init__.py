"""
Service wiring.
The container owns every long-lived client and the cache orchestrator.
"""

from metrics_api.services.container import ServiceContainer, build_container, get_container

__all__ = ["ServiceContainer", "build_container", "get_container"]
