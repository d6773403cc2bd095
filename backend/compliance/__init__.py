"""Compliance tracking backend: enterprises, conventions, KPIs and documents."""

__version__ = "1.0.0"
