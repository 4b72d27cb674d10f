"""Lumon - display brightness control with optimistic local state."""

__version__ = "0.1.0"
