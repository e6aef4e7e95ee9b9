"""Metrics layer: schema registry and the scrape-time collector."""

from marathon_exporter.metrics.collector import Category, CategoryResult, MarathonCollector
from marathon_exporter.metrics.schema import SCHEMA, MetricDescriptor, MetricKind

__all__ = [
    "Category",
    "CategoryResult",
    "MarathonCollector",
    "MetricDescriptor",
    "MetricKind",
    "SCHEMA",
]
