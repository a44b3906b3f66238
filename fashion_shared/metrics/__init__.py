"""Prometheus metrics for outbound calls."""

from .prometheus_metrics import ForecastMetrics, get_metrics

__all__ = ["ForecastMetrics", "get_metrics"]
