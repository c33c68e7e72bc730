"""tcplugin package public API and version.

Exposes convenient imports for external consumers:
- `Settings`: application configuration
- `PluginDescriptor`, `DescriptorBuilder`, `build_descriptor`: descriptor model
- `ArchivePackager`: plugin archive packaging
- `PluginProjectManager`: project discovery and builds
- `ValidationError`, `PackagingError`: build failures
"""

__version__ = "1.0.0"

from .config.settings import Settings
from .errors import DeploymentError, PackagingError, PluginError, ValidationError
from .plugins.builder import DescriptorBuilder, build_descriptor
from .plugins.descriptor import PluginDescriptor
from .plugins.manager import PluginProjectManager
from .plugins.packager import ArchivePackager

__all__ = [
    "Settings",
    "PluginDescriptor",
    "DescriptorBuilder",
    "build_descriptor",
    "ArchivePackager",
    "PluginProjectManager",
    "PluginError",
    "ValidationError",
    "PackagingError",
    "DeploymentError",
]
