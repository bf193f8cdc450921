"""Command line interface for wiretrace."""

from .main import app


__all__ = ["app"]
