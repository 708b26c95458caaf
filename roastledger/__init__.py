"""Roast schedule service for coffee roasting operations."""
__version__ = "0.1.0"
