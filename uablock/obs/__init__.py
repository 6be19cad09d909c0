"""Observability helpers."""

from .logging import configure_logging  # re-export

__all__ = ["configure_logging"]
