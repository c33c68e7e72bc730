"""Plugin project configuration.

A plugin project is a directory holding a ``teamcity-plugin.json`` build
configuration next to the plugin's compiled artifacts::

    my-plugin/
        teamcity-plugin.json
        server/     -> packaged under server/
        agent/      -> packaged under agent/

The configuration either describes the plugin inline (``descriptor``) or
points at a ``teamcity-plugin.xml`` template (``descriptorFile``) whose
``@token@`` placeholders are filled from ``tokens``.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic import ValidationError as PydanticValidationError

from ..errors import ValidationError

PROJECT_CONFIG_FILENAME = "teamcity-plugin.json"


class ProjectConfig(BaseModel):
    """Schema of ``teamcity-plugin.json``."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    archive_name: Optional[str] = Field(default=None, alias="archiveName")
    descriptor: Optional[Dict[str, Any]] = None
    descriptor_file: Optional[str] = Field(default=None, alias="descriptorFile")
    tokens: Dict[str, str] = Field(default_factory=dict)
    server: Optional[List[str]] = None
    agent: Optional[List[str]] = None

    @model_validator(mode="after")
    def check_descriptor_source(self) -> "ProjectConfig":
        """Require exactly one of ``descriptor`` and ``descriptorFile``."""
        if (self.descriptor is None) == (self.descriptor_file is None):
            raise ValueError("Exactly one of 'descriptor' or 'descriptorFile' is required")
        if self.tokens and self.descriptor_file is None:
            raise ValueError("'tokens' can only be used with 'descriptorFile'")
        return self


@dataclass
class PluginProject:
    """A loaded plugin project.

    Args:
        path: Project directory.
        config: Parsed project configuration.
    """

    path: Path
    config: ProjectConfig

    @property
    def name(self) -> str:
        return self.path.name

    def server_sources(self) -> List[Path]:
        """Paths packaged under ``server/``."""
        return self._sources(self.config.server, "server")

    def agent_sources(self) -> List[Path]:
        """Paths packaged under ``agent/``."""
        return self._sources(self.config.agent, "agent")

    def _sources(self, configured: Optional[List[str]], default: str) -> List[Path]:
        if configured is not None:
            return [self.path / entry for entry in configured]
        default_dir = self.path / default
        return [default_dir] if default_dir.is_dir() else []


def _reject_duplicate_keys(pairs):
    result = {}
    for key, value in pairs:
        if key in result:
            raise ValidationError(f"Duplicate key in project configuration: {key}")
        result[key] = value
    return result


def load_project(project_path: Path) -> PluginProject:
    """Load and validate a project's ``teamcity-plugin.json``.

    Duplicate keys anywhere in the file are rejected, so a parameter cannot
    be silently defined twice.

    Raises:
        ValidationError: If the file is missing, malformed, or invalid.
    """
    config_file = project_path / PROJECT_CONFIG_FILENAME
    try:
        text = config_file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ValidationError(f"Cannot read {config_file}: {e}") from e

    try:
        raw = json.loads(text, object_pairs_hook=_reject_duplicate_keys)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Malformed {config_file}: {e}") from e

    try:
        config = ProjectConfig.model_validate(raw)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid {config_file}: {e}") from e

    return PluginProject(path=project_path, config=config)
