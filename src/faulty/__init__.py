"""Faulty: request-level fault injection for Flask/WSGI services."""

__version__ = "0.1.0"
