"""Consultation booking engine and executive analytics pipeline."""

__version__ = "0.1.0"
