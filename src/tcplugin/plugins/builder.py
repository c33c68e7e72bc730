"""Descriptor builder for TeamCity server plugins.

`DescriptorBuilder` collects descriptor values one at a time, in the style of
a build script's ``descriptor { ... }`` block, and produces a validated
`PluginDescriptor`. `build_descriptor()` does the same from a plain mapping of
configuration options such as the ``descriptor`` section of a project's
``teamcity-plugin.json``.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional

from .descriptor import PluginDescriptor
from ..errors import ValidationError

STRING_OPTIONS = {
    "name": "name",
    "displayName": "display_name",
    "version": "version",
    "vendorName": "vendor_name",
    "vendorUrl": "vendor_url",
    "vendorLogo": "vendor_logo",
    "description": "description",
    "downloadUrl": "download_url",
    "email": "email",
    "minimumBuild": "minimum_build",
    "maximumBuild": "maximum_build",
}

BOOLEAN_OPTIONS = {
    "useSeparateClassloader": "use_separate_classloader",
    "allowRuntimeReload": "allow_runtime_reload",
    "nodeResponsibilitiesAware": "node_responsibilities_aware",
}

RECOGNIZED_OPTIONS = set(STRING_OPTIONS) | set(BOOLEAN_OPTIONS) | {
    "parameters",
    "dependencies",
}


class DescriptorBuilder:
    """Accumulate descriptor values and build a `PluginDescriptor`.

    Setters return the builder so calls can be chained::

        descriptor = (
            DescriptorBuilder()
            .set("name", "example")
            .set("version", "1.0-SNAPSHOT")
            .parameter("param", "example server value")
            .build()
        )
    """

    def __init__(self):
        self._values: Dict[str, Any] = {}
        self._parameters: Dict[str, str] = {}
        self._plugin_dependencies: List[str] = []
        self._tool_dependencies: List[str] = []

    def set(self, option: str, value: Any) -> "DescriptorBuilder":
        """Set a scalar descriptor option by its configuration name.

        Raises:
            ValidationError: If the option is unknown or has the wrong type.
        """
        if option in STRING_OPTIONS:
            if value is not None and not isinstance(value, str):
                raise ValidationError(f"Option '{option}' must be a string")
            self._values[STRING_OPTIONS[option]] = value or ""
        elif option in BOOLEAN_OPTIONS:
            if value is not None and not isinstance(value, bool):
                raise ValidationError(f"Option '{option}' must be a boolean")
            self._values[BOOLEAN_OPTIONS[option]] = value
        else:
            raise ValidationError(f"Unknown descriptor option: {option}")
        return self

    def parameter(self, name: str, value: Any) -> "DescriptorBuilder":
        """Add a custom parameter.

        Raises:
            ValidationError: If the name is empty or already defined.
        """
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Parameter name cannot be empty")
        if name in self._parameters:
            raise ValidationError(f"Duplicate parameter: {name}")
        self._parameters[name] = "" if value is None else str(value)
        return self

    def parameters(self, parameters: Any) -> "DescriptorBuilder":
        """Add parameters from a mapping, pairs, or name/value objects."""
        for name, value in _iter_parameters(parameters):
            self.parameter(name, value)
        return self

    def plugin_dependency(self, name: str) -> "DescriptorBuilder":
        """Declare a dependency on another server plugin."""
        self._plugin_dependencies.append(name)
        return self

    def tool_dependency(self, name: str) -> "DescriptorBuilder":
        """Declare a dependency on a tool installed on the server."""
        self._tool_dependencies.append(name)
        return self

    def build(self) -> PluginDescriptor:
        """Return a validated descriptor.

        Raises:
            ValidationError: If name or version is empty.
        """
        values = dict(self._values)
        values.setdefault("name", "")
        values.setdefault("version", "")
        return PluginDescriptor(
            parameters=dict(self._parameters),
            plugin_dependencies=list(self._plugin_dependencies),
            tool_dependencies=list(self._tool_dependencies),
            **values,
        )


def build_descriptor(config: Mapping[str, Any]) -> PluginDescriptor:
    """Build a descriptor from a mapping of configuration options.

    Args:
        config: Options keyed by their configuration names (``name``,
            ``displayName``, ``version``, ``useSeparateClassloader``,
            ``parameters``, ``dependencies`` ...).

    Returns:
        PluginDescriptor: The validated descriptor.

    Raises:
        ValidationError: On unknown options, wrong value types, empty name or
            version, or duplicate parameter names.
    """
    if not isinstance(config, Mapping):
        raise ValidationError("Descriptor configuration must be a mapping")

    unknown = sorted(set(config) - RECOGNIZED_OPTIONS)
    if unknown:
        raise ValidationError(f"Unknown descriptor options: {', '.join(unknown)}")

    builder = DescriptorBuilder()
    for option, value in config.items():
        if option == "parameters":
            builder.parameters(value)
        elif option == "dependencies":
            _apply_dependencies(builder, value)
        else:
            builder.set(option, value)
    return builder.build()


def _iter_parameters(parameters: Any) -> Iterable[tuple]:
    if parameters is None:
        return []
    if isinstance(parameters, Mapping):
        return list(parameters.items())
    if not isinstance(parameters, (list, tuple)):
        raise ValidationError("Parameters must be a mapping or a list")

    pairs = []
    for entry in parameters:
        if isinstance(entry, Mapping):
            if set(entry) != {"name", "value"}:
                raise ValidationError(
                    "Parameter entries must have exactly 'name' and 'value'"
                )
            pairs.append((entry["name"], entry["value"]))
        elif isinstance(entry, (list, tuple)) and len(entry) == 2:
            pairs.append((entry[0], entry[1]))
        else:
            raise ValidationError(f"Invalid parameter entry: {entry!r}")
    return pairs


def _apply_dependencies(builder: DescriptorBuilder, value: Optional[Any]) -> None:
    if value is None:
        return
    if not isinstance(value, Mapping):
        raise ValidationError("Option 'dependencies' must be a mapping")
    unknown = sorted(set(value) - {"plugins", "tools"})
    if unknown:
        raise ValidationError(f"Unknown dependency kinds: {', '.join(unknown)}")
    for name in _dependency_names(value, "plugins"):
        builder.plugin_dependency(name)
    for name in _dependency_names(value, "tools"):
        builder.tool_dependency(name)


def _dependency_names(dependencies: Mapping[str, Any], kind: str) -> List[str]:
    names = dependencies.get(kind, [])
    if not isinstance(names, (list, tuple)) or not all(
        isinstance(name, str) and name.strip() for name in names
    ):
        raise ValidationError(f"Dependency '{kind}' must be a list of names")
    return list(names)
