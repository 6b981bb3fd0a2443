"""HTTP surface for the instrument service."""

from .app import create_app

__all__ = ["create_app"]
