"""Mireb Commercial API: product catalog, lead capture and staff authentication."""

__version__ = "1.0.0"
