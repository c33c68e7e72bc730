"""HTTP application entrypoint and FastAPI app factory for tcplugin.

Defines the `TcPluginApplication` which:

- Configures logging
- Initializes the packager and project manager during app lifespan
  (via `initialize_api()`)
- Registers HTTP routes from `tcplugin/api/routes.py`
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict

import uvicorn
from fastapi import FastAPI

from . import __version__
from .api.routes import initialize_api, router
from .config.settings import Settings


def setup_logging(debug: bool = False) -> None:
    """Configure application logging."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


class TcPluginApplication:
    """Create and run the plugin build service.

    Responsibilities:
    - Provide lifecycle hooks to initialize services
    - Include API routes
    - Expose `create_app()` and `run()` helpers
    """

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or Settings()
        self.app: FastAPI | None = None
        setup_logging(self.settings.debug)
        self.logger = logging.getLogger(__name__)

    def _create_lifespan_manager(self):
        """Create an async lifespan manager that initializes services."""

        @asynccontextmanager
        async def lifespan(app: FastAPI):
            self.logger.info("Starting TeamCity plugin build service...")
            initialize_api(self.settings)
            yield
            self.logger.info("Shutting down TeamCity plugin build service...")

        return lifespan

    def _register_routes(self) -> None:
        """Register application routes including the root info route."""
        self.app.include_router(router)

        @self.app.get("/")
        async def root() -> Dict[str, Any]:
            """Root endpoint providing service information."""
            return {
                "message": "TeamCity plugin build service",
                "version": __version__,
                "status": "running",
            }

    def create_app(self) -> FastAPI:
        """Create and configure the FastAPI application instance."""
        self.app = FastAPI(
            title="tcplugin",
            description="TeamCity server plugin descriptor and packaging service",
            version=__version__,
            lifespan=self._create_lifespan_manager(),
        )
        self._register_routes()
        return self.app

    def run(self) -> None:
        """Run the application server with Uvicorn."""
        if not self.app:
            self.create_app()

        uvicorn.run(
            self.app,
            host=self.settings.api_host,
            port=self.settings.api_port,
            log_level="debug" if self.settings.debug else "info",
        )
