"""Scheduling primitives for recurring background work."""

from .puller import Puller

__all__ = ["Puller"]
