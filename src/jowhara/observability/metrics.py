"""
Jowhara Metrics Store.

In-process metrics collection for observability without external dependencies.
Tracks:
- Fetch latencies per table (percentiles)
- Fetch failures per table and error counts by code (JowharaException.code)
- Realtime notifications received and stale fetches discarded per table

Thread-safe via locks. Singleton pattern for global access.
"""

from __future__ import annotations

import statistics
import threading
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any


@dataclass
class TableMetrics:
    """Metrics for a single table."""

    latencies_ms: list[float] = field(default_factory=list)
    error_counts: dict[str, int] = field(default_factory=lambda: defaultdict(int))
    fetch_count: int = 0
    notification_count: int = 0
    stale_count: int = 0
    last_fetched: datetime | None = None

    # Keep last N latencies to avoid unbounded memory
    MAX_LATENCIES = 1000

    def record_latency(self, ms: float) -> None:
        self.latencies_ms.append(ms)
        if len(self.latencies_ms) > self.MAX_LATENCIES:
            self.latencies_ms = self.latencies_ms[-self.MAX_LATENCIES :]
        self.fetch_count += 1
        self.last_fetched = datetime.now(timezone.utc)

    def record_error(self, code: str) -> None:
        self.error_counts[code] += 1

    def get_percentiles(self) -> dict[str, float]:
        if not self.latencies_ms:
            return {}
        sorted_latencies = sorted(self.latencies_ms)
        n = len(sorted_latencies)
        return {
            "p50_ms": sorted_latencies[int(n * 0.5)],
            "p90_ms": sorted_latencies[int(n * 0.9)],
            "p99_ms": sorted_latencies[int(n * 0.99)] if n > 1 else sorted_latencies[-1],
            "mean_ms": statistics.mean(sorted_latencies),
            "max_ms": sorted_latencies[-1],
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "fetch_count": self.fetch_count,
            "notification_count": self.notification_count,
            "stale_count": self.stale_count,
            "last_fetched": self.last_fetched.isoformat() if self.last_fetched else None,
            **self.get_percentiles(),
            "errors": dict(self.error_counts),
        }


class MetricsStore:
    """
    Central metrics store for Jowhara observability.

    Thread-safe singleton for collecting metrics across the application.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._tables: dict[str, TableMetrics] = defaultdict(TableMetrics)
        self._global_errors: dict[str, int] = defaultdict(int)
        self._started_at = datetime.now(timezone.utc)

    # -------------------------------------------------------------------------
    # Table Metrics
    # -------------------------------------------------------------------------

    def record_fetch_latency(self, table: str, ms: float) -> None:
        """Record how long a settled fetch took."""
        with self._lock:
            self._tables[table].record_latency(ms)

    def record_fetch_error(self, table: str, code: str) -> None:
        """Record a failed fetch for a specific table."""
        with self._lock:
            self._tables[table].record_error(code)
            self._global_errors[code] += 1

    def record_notification(self, table: str) -> None:
        """Record a realtime change notification."""
        with self._lock:
            self._tables[table].notification_count += 1

    def record_stale_fetch(self, table: str) -> None:
        """Record a fetch result discarded because a newer one was applied."""
        with self._lock:
            self._tables[table].stale_count += 1

    # -------------------------------------------------------------------------
    # Global Errors
    # -------------------------------------------------------------------------

    def record_error(self, code: str) -> None:
        """Record a global error (not tied to a specific table)."""
        with self._lock:
            self._global_errors[code] += 1

    # -------------------------------------------------------------------------
    # Summary / Export
    # -------------------------------------------------------------------------

    def get_summary(self) -> dict[str, Any]:
        """
        Get a summary of all metrics.

        Returns a dict suitable for JSON serialization and /metrics endpoint.
        """
        with self._lock:
            now = datetime.now(timezone.utc)
            uptime_seconds = (now - self._started_at).total_seconds()
            return {
                "uptime_seconds": round(uptime_seconds, 1),
                "collected_at": now.isoformat(),
                "tables": {name: metrics.to_dict() for name, metrics in self._tables.items()},
                "global_errors": dict(self._global_errors),
            }

    def reset(self) -> None:
        """Reset all metrics. Useful for testing."""
        with self._lock:
            self._tables.clear()
            self._global_errors.clear()
            self._started_at = datetime.now(timezone.utc)


# -----------------------------------------------------------------------------
# Singleton accessor
# -----------------------------------------------------------------------------

@lru_cache(maxsize=1)
def get_metrics_store() -> MetricsStore:
    """Get the global MetricsStore singleton."""
    return MetricsStore()
