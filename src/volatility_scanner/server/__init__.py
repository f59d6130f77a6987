"""HTTP delivery of scanner results."""

from .web import create_app

__all__ = ["create_app"]
