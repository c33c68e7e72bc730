"""Plugin descriptor and packaging exports.

Exposes:
- `PluginDescriptor`, `DescriptorBuilder`, `build_descriptor`: descriptor model
- `render_descriptor`, `parse_descriptor`: ``teamcity-plugin.xml`` codec
- `ArchivePackager`, `PluginArchiveValidator`: archive creation and checks
- `PluginProjectManager`, `PluginBuild`: project discovery and builds
"""

from .builder import DescriptorBuilder, build_descriptor
from .descriptor import DESCRIPTOR_FILENAME, PluginDescriptor
from .manager import PluginBuild, PluginProjectManager
from .packager import ArchivePackager, normalize_archive_name
from .validator import PluginArchiveValidator
from .writer import parse_descriptor, render_descriptor

__all__ = [
    "DESCRIPTOR_FILENAME",
    "PluginDescriptor",
    "DescriptorBuilder",
    "build_descriptor",
    "render_descriptor",
    "parse_descriptor",
    "ArchivePackager",
    "normalize_archive_name",
    "PluginArchiveValidator",
    "PluginProjectManager",
    "PluginBuild",
]
