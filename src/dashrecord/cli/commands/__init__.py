"""Command module exports."""

from . import schema

__all__ = ["schema"]
