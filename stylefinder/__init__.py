"""Preference-to-query normalization and garment sizing for StyleFinder."""

__version__ = "0.1.0"
