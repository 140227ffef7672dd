"""Prometheus exporter for Screeps account, shard and room statistics."""

__version__ = "1.0.0"
