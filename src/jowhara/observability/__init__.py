"""
Jowhara Observability Module.

Provides in-process metrics collection for fetches, realtime notifications and errors.
"""

from jowhara.observability.metrics import MetricsStore, get_metrics_store

__all__ = ["MetricsStore", "get_metrics_store"]
