"""Enrich tabular records by reconciling them against external lookup APIs."""

__version__ = "0.1.0"
