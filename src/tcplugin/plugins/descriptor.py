"""TeamCity server plugin descriptor model.

`PluginDescriptor` is the in-memory form of the ``teamcity-plugin.xml``
manifest a TeamCity server reads when it loads a plugin archive. It is built
once per build from static configuration (see `builder`), serialized once
(see `writer`) and then discarded.
"""

from dataclasses import dataclass, field, fields
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from ..errors import ValidationError

DESCRIPTOR_FILENAME = "teamcity-plugin.xml"


@dataclass(frozen=True)
class PluginDescriptor:
    """Metadata describing a TeamCity server plugin to its host.

    Args:
        name: Unique plugin name used by the server to identify the plugin.
        version: Plugin version string, e.g. ``1.0-SNAPSHOT``.
        display_name: Name shown in the TeamCity UI.
        vendor_name: Name of the plugin vendor.
        vendor_url: Vendor home page.
        vendor_logo: URL or archive path of the vendor logo.
        description: Human-readable summary of the plugin.
        download_url: Where the plugin can be downloaded from.
        email: Contact address for the plugin author.
        use_separate_classloader: Load the plugin in its own classloader.
            ``None`` leaves the decision to the server.
        allow_runtime_reload: Allow the server to reload the plugin without
            a restart.
        node_responsibilities_aware: Plugin supports multi-node servers.
        minimum_build: Lowest TeamCity build number the plugin supports.
        maximum_build: Highest TeamCity build number the plugin supports.
        parameters: Custom parameters passed to the plugin at runtime.
        plugin_dependencies: Names of plugins this plugin requires.
        tool_dependencies: Names of tools this plugin requires.
    """

    name: str
    version: str
    display_name: str = ""
    vendor_name: str = ""
    vendor_url: str = ""
    vendor_logo: str = ""
    description: str = ""
    download_url: str = ""
    email: str = ""
    use_separate_classloader: Optional[bool] = None
    allow_runtime_reload: Optional[bool] = None
    node_responsibilities_aware: Optional[bool] = None
    minimum_build: str = ""
    maximum_build: str = ""
    parameters: Mapping[str, str] = field(default_factory=dict)
    plugin_dependencies: Tuple[str, ...] = ()
    tool_dependencies: Tuple[str, ...] = ()

    def __post_init__(self):
        """Validate descriptor values after initialization."""
        if not self.name or not self.name.strip():
            raise ValidationError("Plugin name cannot be empty")
        if not self.version or not self.version.strip():
            raise ValidationError("Plugin version cannot be empty")
        for key in self.parameters:
            if not key or not key.strip():
                raise ValidationError("Parameter name cannot be empty")

        # Parameters and dependencies are read-only after validation.
        object.__setattr__(self, "parameters", MappingProxyType(dict(self.parameters)))
        object.__setattr__(self, "plugin_dependencies", tuple(self.plugin_dependencies))
        object.__setattr__(self, "tool_dependencies", tuple(self.tool_dependencies))

    @property
    def has_requirements(self) -> bool:
        """Check if a supported build range is declared."""
        return bool(self.minimum_build or self.maximum_build)

    @property
    def has_dependencies(self) -> bool:
        """Check if plugin or tool dependencies are declared."""
        return bool(self.plugin_dependencies or self.tool_dependencies)

    def to_dict(self) -> Dict[str, Any]:
        """Return the descriptor as plain JSON-serializable values."""
        result = {f.name: getattr(self, f.name) for f in fields(self)}
        result["parameters"] = dict(self.parameters)
        result["plugin_dependencies"] = list(self.plugin_dependencies)
        result["tool_dependencies"] = list(self.tool_dependencies)
        return result

    @property
    def default_archive_name(self) -> str:
        """Archive name used when none is configured."""
        return f"{self.name}-{self.version}.zip"
