"""Metrics module using Prometheus."""

from .prometheus_metrics import (
    HTTPMetrics,
    MarketplaceMetrics,
    get_http_metrics,
    get_marketplace_metrics,
    render_latest,
)

__all__ = [
    "HTTPMetrics",
    "MarketplaceMetrics",
    "get_http_metrics",
    "get_marketplace_metrics",
    "render_latest",
]
