"""Shared base classes."""

from .loggable import Loggable

__all__ = ["Loggable"]
