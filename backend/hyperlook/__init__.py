"""Hyperlook: log-store poller exporting pattern metrics to Prometheus."""

__version__ = "0.1.0"
