"""Docker based TeamCity server environment.

Runs the official TeamCity server image with the local data directory
mounted, so deployed plugins are loaded by a real server during development.
"""

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List

from ..base.loggable import Loggable
from ..config.settings import Settings
from ..errors import DeploymentError


@dataclass
class DockerEnvironment(Loggable):
    """A TeamCity server and build agent running in Docker.

    Args:
        version: TeamCity image tag, e.g. ``2023.11``.
        data_dir: Host directory mounted as the server's data directory.
        server_options: Value of ``TEAMCITY_SERVER_OPTS`` in the container.
        server_image: Server image name.
        server_name: Container name for the server.
        agent_image: Build agent image name.
        agent_name: Container name for the build agent.
        port: Host port mapped to the server's port 8111.
    """

    version: str
    data_dir: str
    server_options: str = ""
    server_image: str = "jetbrains/teamcity-server"
    server_name: str = "teamcity-server"
    agent_image: str = "jetbrains/teamcity-agent"
    agent_name: str = "teamcity-agent"
    port: int = 8111

    def __post_init__(self):
        super().__init__()

    @classmethod
    def from_settings(cls, settings: Settings) -> "DockerEnvironment":
        return cls(
            version=settings.teamcity_version,
            data_dir=str(Path(settings.data_dir).resolve()),
            server_options=settings.server_options,
            server_image=settings.server_image,
            server_name=settings.server_container,
            agent_image=settings.agent_image,
            agent_name=settings.agent_container,
        )

    def start_server_command(self) -> List[str]:
        """Build the ``docker run`` command line for the server container."""
        return [
            "docker",
            "run",
            "--detach",
            "--rm",
            "--name",
            self.server_name,
            "-v",
            f"{self.data_dir}:/data/teamcity_server/datadir",
            "-v",
            f"{self.data_dir}/logs:/opt/teamcity/logs",
            "-e",
            f'TEAMCITY_SERVER_OPTS="{self.server_options}"',
            "-p",
            f"{self.port}:8111",
            f"{self.server_image}:{self.version}",
        ]

    def stop_server_command(self) -> List[str]:
        """Build the ``docker stop`` command line for the server container."""
        return ["docker", "stop", self.server_name]

    def start_agent_command(self) -> List[str]:
        """Build the ``docker run`` command line for the agent container.

        The agent reaches the server through a container link, and keeps its
        configuration under ``<data dir>/agent`` between runs.
        """
        return [
            "docker",
            "run",
            "--detach",
            "--rm",
            "--name",
            self.agent_name,
            "--link",
            f"{self.server_name}:{self.server_name}",
            "-e",
            f"SERVER_URL=http://{self.server_name}:8111",
            "-v",
            f"{self.data_dir}/agent:/data/teamcity_agent/conf",
            f"{self.agent_image}:{self.version}",
        ]

    def stop_agent_command(self) -> List[str]:
        """Build the ``docker stop`` command line for the agent container."""
        return ["docker", "stop", self.agent_name]

    def start_server(self) -> str:
        """Start the server container.

        The exit status is not checked: Docker reports problems such as an
        already running container on its output, which is logged.

        Returns:
            str: Combined output of the docker command.
        """
        self.logger.info(f"Starting TeamCity server {self.server_image}:{self.version}")
        return self._run(self.start_server_command())

    def stop_server(self) -> str:
        """Stop the server container."""
        self.logger.info(f"Stopping TeamCity server container {self.server_name}")
        return self._run(self.stop_server_command())

    def start_agent(self) -> str:
        """Start the build agent container, connected to the server."""
        self.logger.info(f"Starting TeamCity agent {self.agent_image}:{self.version}")
        return self._run(self.start_agent_command())

    def stop_agent(self) -> str:
        """Stop the build agent container."""
        self.logger.info(f"Stopping TeamCity agent container {self.agent_name}")
        return self._run(self.stop_agent_command())

    def _run(self, command: List[str]) -> str:
        try:
            result = subprocess.run(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                check=False,
            )
        except OSError as e:
            raise DeploymentError(f"Cannot run docker: {e}") from e
        self.logger.info(result.stdout)
        return result.stdout
