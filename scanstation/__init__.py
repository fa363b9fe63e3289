"""Scan Station: vendor API proxy and local utility widgets."""

__version__ = "0.1.0"
