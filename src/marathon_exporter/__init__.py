"""Prometheus exporter for Marathon cluster state."""

__version__ = "0.1.0"
