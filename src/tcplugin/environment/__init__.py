"""Local TeamCity environment helpers.

Exposes:
- `deploy_plugins`: copy plugin archives into a server's plugins directory
- `DockerEnvironment`: start and stop a TeamCity server container
"""

from .deploy import deploy_plugins
from .docker import DockerEnvironment

__all__ = ["deploy_plugins", "DockerEnvironment"]
