"""Metrics Collector - Bounded time series for named observations.

Every metric name gets its own ring buffer, created on first record.
Summaries are computed over whatever the buffer currently holds, so after
eviction they reflect only the most recent samples.
"""

from __future__ import annotations

import logging
import time
from typing import Dict, List, Optional

import numpy as np

from ..core.errors import ConfigurationError
from ..core.ring_buffer import RingBuffer

logger = logging.getLogger(__name__)


class MetricsCollection:
    """
    Collects and manages system-wide metrics.

    Attributes:
        observations: metric name -> RingBuffer of samples
        thresholds: metric name -> alerting threshold (stored, not enforced)
        last_update: timestamp of the most recent record_metric call
    """

    def __init__(self, buffer_size: int = 1000):
        if not isinstance(buffer_size, int) or buffer_size <= 0:
            raise ConfigurationError(f"buffer_size must be a positive integer, got {buffer_size!r}")
        self.buffer_size = buffer_size

        self.observations: Dict[str, RingBuffer[float]] = {}
        self.thresholds: Dict[str, float] = {}
        self.last_update: float = time.time()

    def record_metric(
        self,
        name: str,
        value: float,
        timestamp: Optional[float] = None,
    ) -> None:
        """
        Record a new metric value.

        NaN and negative values are stored as-is.
        """
        series = self.observations.get(name)
        if series is None:
            series = RingBuffer(self.buffer_size)
            self.observations[name] = series
            logger.debug("Created metric series %s (capacity=%d)", name, self.buffer_size)
        series.push(value)
        self.last_update = time.time() if timestamp is None else timestamp

    def get_metrics_summary(self) -> Dict[str, Dict[str, float]]:
        """Generate summary statistics for all non-empty metrics."""
        summary: Dict[str, Dict[str, float]] = {}

        for name, series in self.observations.items():
            if not series:
                continue
            values = np.fromiter(series, dtype=float, count=len(series))
            summary[name] = {
                "mean": float(np.mean(values)),
                "std": float(np.std(values)),   # population (ddof=0)
                "min": float(np.min(values)),
                "max": float(np.max(values)),
                "last": float(series.newest()),
            }

        return summary

    def set_threshold(self, name: str, value: float) -> None:
        self.thresholds[name] = value

    def get_series(self, name: str) -> List[float]:
        """Samples for a metric, oldest first. Empty if never recorded."""
        series = self.observations.get(name)
        return series.to_list() if series is not None else []

    def exceeded_thresholds(self) -> Dict[str, float]:
        """Metrics whose latest value is above their threshold.

        Informational only; nothing here reacts to a breach.
        """
        breached = {}
        for name, threshold in self.thresholds.items():
            series = self.observations.get(name)
            if series and series.newest() > threshold:
                breached[name] = series.newest()
        return breached

    @property
    def metric_names(self) -> List[str]:
        return list(self.observations.keys())


def create_metrics_collector(buffer_size: int = 1000) -> MetricsCollection:
    """Initialize a new metrics collector."""
    return MetricsCollection(buffer_size=buffer_size)
