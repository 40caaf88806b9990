"""Personal task tracker with live sync and assisted list ingestion."""

__version__ = "0.1.0"
