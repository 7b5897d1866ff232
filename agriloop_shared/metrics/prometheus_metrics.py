"""Prometheus metrics definitions and helpers.

Provides the HTTP and marketplace metric families exported by the API.
"""

from typing import Optional

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    REGISTRY,
    generate_latest,
)


class HTTPMetrics:
    """Request-level metrics recorded by the logging middleware."""

    def __init__(self, registry: CollectorRegistry = REGISTRY) -> None:
        """Initialize HTTP metrics.

        Args:
            registry: Prometheus registry to use
        """
        self.requests_total = Counter(
            "agriloop_http_requests_total",
            "Total HTTP requests",
            ["method", "endpoint", "status"],
            registry=registry,
        )

        self.request_duration = Histogram(
            "agriloop_http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["method", "endpoint"],
            buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
            registry=registry,
        )

        self.requests_in_progress = Gauge(
            "agriloop_http_requests_in_progress",
            "HTTP requests currently in progress",
            ["method", "endpoint"],
            registry=registry,
        )


class MarketplaceMetrics:
    """Business counters for the marketplace."""

    def __init__(self, registry: CollectorRegistry = REGISTRY) -> None:
        """Initialize marketplace metrics.

        Args:
            registry: Prometheus registry to use
        """
        self.users_registered = Counter(
            "agriloop_users_registered_total",
            "Users registered",
            ["role"],
            registry=registry,
        )

        self.listings_created = Counter(
            "agriloop_listings_created_total",
            "Waste listings created",
            ["waste_type"],
            registry=registry,
        )

        self.orders_created = Counter(
            "agriloop_orders_created_total",
            "Orders placed",
            registry=registry,
        )

        self.order_status_changes = Counter(
            "agriloop_order_status_changes_total",
            "Order status transitions",
            ["status"],
            registry=registry,
        )

        self.showcases_created = Counter(
            "agriloop_showcases_created_total",
            "Showcases published",
            ["category"],
            registry=registry,
        )


_http_metrics: Optional[HTTPMetrics] = None
_marketplace_metrics: Optional[MarketplaceMetrics] = None


def get_http_metrics() -> HTTPMetrics:
    """Return the process-wide HTTP metrics, creating them on first use."""
    global _http_metrics
    if _http_metrics is None:
        _http_metrics = HTTPMetrics()
    return _http_metrics


def get_marketplace_metrics() -> MarketplaceMetrics:
    """Return the process-wide marketplace metrics, creating them on first use."""
    global _marketplace_metrics
    if _marketplace_metrics is None:
        _marketplace_metrics = MarketplaceMetrics()
    return _marketplace_metrics


def render_latest(registry: CollectorRegistry = REGISTRY) -> bytes:
    """Render the registry in the Prometheus text exposition format."""
    return generate_latest(registry)
