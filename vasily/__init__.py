"""Packet parsing, route tracing and heatmap colours for network path monitoring."""

__version__ = "0.1.0"