"""HTTP boundary for sheet-filter."""

from .app import create_app

__all__ = ["create_app"]
