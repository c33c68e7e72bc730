"""FastAPI routes and service wiring for tcplugin.

Exposes HTTP endpoints for:

- Validating a descriptor configuration and rendering its manifest
- Building all plugin projects and listing the resulting archives
- Deploying built archives to the configured TeamCity data directory
- A liveness probe

Also provides `initialize_api()` to construct the packager and the project
manager and to wire them into a shared service container.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import BaseModel

from ..base.loggable import Loggable
from ..config.settings import Settings
from ..environment.deploy import deploy_plugins
from ..errors import DeploymentError, ValidationError
from ..plugins.builder import build_descriptor
from ..plugins.manager import PluginProjectManager
from ..plugins.packager import ArchivePackager
from ..plugins.validator import PluginArchiveValidator
from ..plugins.writer import render_descriptor


class DescriptorResponse(BaseModel):
    """Rendered descriptor for a validated configuration.

    Attributes:
        name: Plugin name.
        version: Plugin version.
        descriptor: ``teamcity-plugin.xml`` content.
    """

    name: str
    version: str
    descriptor: str


class PluginInfo(BaseModel):
    """Public information about a plugin build.

    Attributes:
        name: Plugin name.
        version: Plugin version.
        description: Human-readable description.
        archive: Path of the packaged archive.
    """

    name: str
    version: str
    description: str
    archive: str


class BuildSummary(BaseModel):
    """Outcome of building all projects."""

    status: str
    built: List[str]
    failed: List[str]


class APIServiceContainer(Loggable):
    """Container for API services and dependencies.

    Accessors raise HTTP 503 if the services are not initialized.
    """

    def __init__(self) -> None:
        super().__init__()
        self.settings: Optional[Settings] = None
        self.project_manager: Optional[PluginProjectManager] = None

    def initialize(self, settings: Settings, project_manager: PluginProjectManager) -> None:
        self.settings = settings
        self.project_manager = project_manager
        self.logger.info("API services initialized")

    def get_project_manager(self) -> PluginProjectManager:
        """Return the project manager or raise HTTP 503 if unavailable."""
        if not self.project_manager:
            raise HTTPException(status_code=503, detail="Project manager not initialized")
        return self.project_manager

    def get_settings(self) -> Settings:
        """Return the settings or raise HTTP 503 if unavailable."""
        if not self.settings:
            raise HTTPException(status_code=503, detail="Settings not initialized")
        return self.settings


# Global service container
service_container = APIServiceContainer()
router = APIRouter(prefix="/api/v1")


def get_project_manager() -> PluginProjectManager:
    """FastAPI dependency providing the initialized project manager."""
    return service_container.get_project_manager()


def get_settings() -> Settings:
    """FastAPI dependency providing the active settings."""
    return service_container.get_settings()


def _plugin_info(build) -> PluginInfo:
    return PluginInfo(
        name=build.descriptor.name,
        version=build.descriptor.version,
        description=build.descriptor.description,
        archive=str(build.archive_path),
    )


@router.post("/descriptor", response_model=DescriptorResponse)
async def render(config: Dict[str, Any] = Body(...)):
    """Validate a descriptor configuration and render ``teamcity-plugin.xml``.

    Raises:
        HTTPException: 422 if the configuration is invalid.
    """
    try:
        descriptor = build_descriptor(config)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return DescriptorResponse(
        name=descriptor.name,
        version=descriptor.version,
        descriptor=render_descriptor(descriptor),
    )


@router.post("/projects/build", response_model=BuildSummary)
async def build_projects(pm: PluginProjectManager = Depends(get_project_manager)):
    """Build every discovered plugin project."""
    pm.build_all()
    return BuildSummary(
        status="success" if not pm.failed_projects else "partial",
        built=sorted(pm.built_projects),
        failed=sorted(pm.failed_projects),
    )


@router.get("/projects", response_model=List[PluginInfo])
async def list_projects(pm: PluginProjectManager = Depends(get_project_manager)):
    """List successfully built plugins."""
    return [_plugin_info(build) for build in pm.get_builds()]


@router.get("/projects/{plugin_name}", response_model=PluginInfo)
async def get_project(plugin_name: str, pm: PluginProjectManager = Depends(get_project_manager)):
    """Return build details for a plugin.

    Raises:
        HTTPException: 404 if the plugin has not been built.
    """
    build = pm.get_build(plugin_name)
    if not build:
        raise HTTPException(status_code=404, detail=f"Plugin {plugin_name} not found")
    return _plugin_info(build)


@router.post("/projects/deploy")
async def deploy_projects(
    pm: PluginProjectManager = Depends(get_project_manager),
    settings: Settings = Depends(get_settings),
):
    """Copy built archives to the TeamCity plugins directory."""
    try:
        deployed = deploy_plugins(pm.get_archives(), settings.plugins_dir)
    except DeploymentError as e:
        service_container.logger.error(f"Plugin deployment error: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    return {"status": "deployed", "archives": [path.name for path in deployed]}


@router.get("/health")
async def health_check():
    """Simple liveness probe for the API service."""
    return {"status": "healthy"}


def create_project_manager(settings: Settings) -> PluginProjectManager:
    """Build a project manager configured from settings."""
    packager = ArchivePackager(
        overwrite=settings.overwrite_archive,
        validator=PluginArchiveValidator() if settings.validate_archives else None,
    )
    return PluginProjectManager(
        settings.projects_dir,
        settings.output_dir,
        packager,
        default_archive_name=settings.archive_name,
    )


def initialize_api(settings: Settings) -> None:
    """Initialize API components and wire services into the container.

    Args:
        settings: Application settings with project and output locations.
    """
    service_container.initialize(settings, create_project_manager(settings))
    service_container.logger.info(
        f"Serving plugin projects from {settings.projects_dir}"
    )
