"""Bounded per-name metric series and their summary statistics."""

from .collector import MetricsCollection, create_metrics_collector

__all__ = ["MetricsCollection", "create_metrics_collector"]
