"""Plugin project management.

This module discovers plugin projects (directories with a
``teamcity-plugin.json``), resolves their descriptors, packages them with the
`ArchivePackager` and keeps track of which projects built and which failed.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

from .builder import build_descriptor
from .descriptor import PluginDescriptor
from .packager import ArchivePackager
from .processor import process_descriptor
from .project import PROJECT_CONFIG_FILENAME, PluginProject, load_project
from .writer import parse_descriptor, render_descriptor
from ..base.loggable import Loggable
from ..errors import PluginError, ValidationError


@dataclass
class PluginBuild:
    """Result of building one plugin project."""

    project: PluginProject
    descriptor: PluginDescriptor
    archive_path: Path


class PluginProjectManager(Loggable):
    """Manage discovery and packaging of plugin projects.

    Responsibilities:
    - Discover project directories containing ``teamcity-plugin.json``
    - Resolve inline or template descriptors
    - Package each project into its archive
    - Track built and failed projects
    """

    def __init__(
        self,
        projects_dir: str,
        output_dir: str,
        packager: ArchivePackager,
        default_archive_name: Optional[str] = None,
    ):
        super().__init__()
        self.projects_dir = Path(projects_dir)
        self.output_dir = Path(output_dir)
        self.packager = packager
        self.default_archive_name = default_archive_name

        # Keyed by project directory name.
        self.builds: Dict[str, PluginBuild] = {}
        self.built_projects: Set[str] = set()
        self.failed_projects: Set[str] = set()

    def discover_projects(self) -> List[Path]:
        """Discover plugin project directories.

        Returns:
            List[Path]: Directories recognized as plugin projects, sorted by
            name. The projects directory itself counts when it holds a
            configuration file.
        """
        projects = []
        if not self.projects_dir.exists():
            self.logger.warning(f"Projects directory not found: {self.projects_dir}")
            return projects

        if (self.projects_dir / PROJECT_CONFIG_FILENAME).exists():
            projects.append(self.projects_dir)

        for project_path in sorted(self.projects_dir.iterdir()):
            if project_path.is_dir() and (project_path / PROJECT_CONFIG_FILENAME).exists():
                projects.append(project_path)

        self.logger.info(f"Discovered {len(projects)} plugin projects")
        return projects

    def resolve_descriptor(self, project: PluginProject) -> Tuple[PluginDescriptor, str]:
        """Return the project's descriptor and its rendered manifest text.

        Raises:
            ValidationError: If the descriptor or its template is invalid.
        """
        config = project.config
        if config.descriptor is not None:
            descriptor = build_descriptor(config.descriptor)
            return descriptor, render_descriptor(descriptor)

        template_path = project.path / config.descriptor_file
        try:
            template = template_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ValidationError(f"Cannot read descriptor template {template_path}: {e}") from e

        text = process_descriptor(template, config.tokens)
        return parse_descriptor(text), text

    def build_project(self, project_path: Path) -> PluginBuild:
        """Package a single plugin project.

        Args:
            project_path: Project directory containing ``teamcity-plugin.json``.

        Returns:
            PluginBuild: The descriptor and the written archive.

        Raises:
            ValidationError: If the project configuration is invalid.
            PackagingError: If the archive cannot be written.
        """
        self.logger.info(f"Building plugin project: {project_path}")
        try:
            project = load_project(project_path)
            descriptor, text = self.resolve_descriptor(project)
            archive_name = (
                project.config.archive_name
                or self.default_archive_name
                or descriptor.default_archive_name
            )
            archive_path = self.packager.package_descriptor_text(
                text,
                archive_name,
                self.output_dir,
                server_files=project.server_sources(),
                agent_files=project.agent_sources(),
            )
        except PluginError:
            self.builds.pop(project_path.name, None)
            self.built_projects.discard(project_path.name)
            self.failed_projects.add(project_path.name)
            raise

        build = PluginBuild(project=project, descriptor=descriptor, archive_path=archive_path)
        self.builds[project.name] = build
        self.built_projects.add(project.name)
        self.failed_projects.discard(project.name)

        self.logger.info(
            f"Successfully built plugin: {descriptor.name} v{descriptor.version}"
        )
        self.logger.info(f"  - Archive: {archive_path}")
        return build

    def build_all(self) -> None:
        """Discover and build all plugin projects.

        Logs a summary of successes and failures. Does not raise.
        """
        project_paths = self.discover_projects()

        built_count = 0
        for project_path in project_paths:
            try:
                self.build_project(project_path)
                built_count += 1
            except PluginError as e:
                self.logger.error(f"Failed to build plugin project {project_path}: {e}")

        self.logger.info(f"Built {built_count}/{len(project_paths)} plugin projects")

        if self.failed_projects:
            self.logger.warning(f"Failed to build projects: {sorted(self.failed_projects)}")

    def get_build(self, name: str) -> Optional[PluginBuild]:
        """Get a previous build by project name or plugin name."""
        if name in self.builds:
            return self.builds[name]
        for build in self.builds.values():
            if build.descriptor.name == name:
                return build
        return None

    def get_builds(self) -> List[PluginBuild]:
        """Return all successful builds."""
        return list(self.builds.values())

    def get_built_plugins(self) -> List[str]:
        """List names of successfully built projects."""
        return list(self.builds.keys())

    def get_archives(self) -> List[Path]:
        """Return archive paths of all successful builds."""
        return [build.archive_path for build in self.builds.values()]
