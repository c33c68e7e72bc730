"""API package exports.

Exposes:
- `router`: FastAPI router for plugin build endpoints
- `initialize_api`: wire services into the shared container
"""

from .routes import initialize_api, router

__all__ = ["router", "initialize_api"]
