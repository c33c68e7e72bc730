"""Configuration settings for tcplugin.

This module defines a Pydantic ``BaseSettings`` model used to configure the
packager, the local TeamCity environment and the HTTP API via environment
variables and a ``.env`` file. Environment variables are read with the
``TCPLUGIN_`` prefix (case-insensitive), and field descriptions serve as the
authoritative documentation for each setting.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

VERSION_PATTERN = re.compile(r"^\d+\.\d+(\.\d+)?$")


class Settings(BaseSettings):
    """Application settings with environment variable support and validation.

    Notes:
    - Values can be provided via environment variables with prefix
      ``TCPLUGIN_`` (e.g., ``TCPLUGIN_OUTPUT_DIR=dist``), or from a ``.env``
      file.
    - Configuration is case-insensitive and validates assignments at runtime.
    """

    debug: bool = Field(default=False, description="Enable debug logging")

    archive_name: Optional[str] = Field(
        default=None,
        description="Archive file name used when a project does not set one",
    )
    projects_dir: str = Field(
        default="./plugins", description="Directory containing plugin projects"
    )
    output_dir: str = Field(
        default="./build/distributions",
        description="Directory receiving packaged plugin archives",
    )
    overwrite_archive: bool = Field(
        default=True, description="Replace an existing archive with the same name"
    )
    validate_archives: bool = Field(
        default=True, description="Check archive contents after packaging"
    )

    teamcity_version: str = Field(
        default="2023.11", description="TeamCity version for the local environment"
    )
    data_dir: str = Field(
        default="./data", description="TeamCity data directory for deployment"
    )
    server_options: str = Field(
        default="-Dteamcity.development.mode=true",
        description="JVM options passed to the TeamCity server container",
    )
    server_image: str = Field(
        default="jetbrains/teamcity-server", description="TeamCity server image"
    )
    server_container: str = Field(
        default="teamcity-server", description="TeamCity server container name"
    )
    agent_image: str = Field(
        default="jetbrains/teamcity-agent", description="TeamCity build agent image"
    )
    agent_container: str = Field(
        default="teamcity-agent", description="TeamCity build agent container name"
    )

    api_host: str = Field(default="127.0.0.1", description="API server host")
    api_port: int = Field(default=8000, ge=1, le=65535, description="API server port")

    @field_validator("teamcity_version")
    @classmethod
    def validate_teamcity_version(cls, value: str) -> str:
        """Validate a TeamCity version such as ``2023.11`` or ``2020.1.2``.

        Raises:
            ValueError: If the version is not a dotted numeric release.
        """
        if not VERSION_PATTERN.match(value):
            raise ValueError(
                f"Invalid TeamCity version: {value}. "
                "Expected a release such as 2023.11 or 2020.1.2"
            )
        return value

    @field_validator("archive_name")
    @classmethod
    def validate_archive_name(cls, value: Optional[str]) -> Optional[str]:
        """Ensure the archive name is a bare file name."""
        if value is not None and ("/" in value or "\\" in value):
            raise ValueError(f"Archive name must not contain a path: {value}")
        return value

    @property
    def plugins_dir(self) -> Path:
        """Return the TeamCity server's plugins directory under `data_dir`."""
        return Path(self.data_dir) / "plugins"

    model_config = {
        "env_file": ".env",
        "env_prefix": "TCPLUGIN_",
        "case_sensitive": False,
        "validate_assignment": True,
        "extra": "ignore",
    }
