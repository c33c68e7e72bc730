"""Deployment of plugin archives to a TeamCity data directory."""

import logging
import shutil
from pathlib import Path
from typing import Iterable, List

from ..errors import DeploymentError

logger = logging.getLogger(__name__)


def deploy_plugins(archives: Iterable[Path], plugins_dir: Path) -> List[Path]:
    """Copy plugin archives into the server's plugins directory.

    The directory is created when missing. Existing archives with the same
    name are replaced, which the server picks up on its next plugin scan.

    Args:
        archives: Plugin archives to deploy.
        plugins_dir: The ``<data dir>/plugins`` directory of the server.

    Returns:
        List[Path]: Paths of the deployed copies.

    Raises:
        DeploymentError: If an archive is missing or cannot be copied.
    """
    plugins_dir = Path(plugins_dir)
    deployed = []
    try:
        plugins_dir.mkdir(parents=True, exist_ok=True)
        for archive in archives:
            archive = Path(archive)
            if not archive.is_file():
                raise DeploymentError(f"Plugin archive not found: {archive}")
            target = plugins_dir / archive.name
            shutil.copy2(archive, target)
            logger.info(f"Deployed {archive.name} to {plugins_dir}")
            deployed.append(target)
    except OSError as e:
        raise DeploymentError(f"Failed to deploy plugins to {plugins_dir}: {e}") from e
    return deployed
