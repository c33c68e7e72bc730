"""Configuration package exports.

Exposes:
- `Settings`: Pydantic settings for building and deploying plugins
"""

from .settings import Settings

__all__ = ["Settings"]
