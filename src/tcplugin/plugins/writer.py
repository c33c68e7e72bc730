"""Serialization of plugin descriptors to the TeamCity manifest format.

TeamCity reads plugin metadata from a ``teamcity-plugin.xml`` file at the
root of the plugin archive. `render_descriptor()` produces that file from a
`PluginDescriptor`; `parse_descriptor()` reads one back, which the archive
validator and the ``inspect`` tooling rely on.
"""

import xml.etree.ElementTree as ET
from typing import Optional

from .builder import DescriptorBuilder
from .descriptor import PluginDescriptor
from ..errors import ValidationError

SCHEMA_LOCATION = "urn:schemas-jetbrains-com:teamcity-plugin-v1-xml"
XSI_NAMESPACE = "http://www.w3.org/2001/XMLSchema-instance"


def render_descriptor(descriptor: PluginDescriptor) -> str:
    """Render a descriptor as ``teamcity-plugin.xml`` content.

    Name and version are always written; other elements are only written
    when they carry a value.

    Args:
        descriptor: The descriptor to serialize.

    Returns:
        str: The XML document, including the XML declaration.
    """
    root = ET.Element(
        "teamcity-plugin",
        {
            "xmlns:xsi": XSI_NAMESPACE,
            "xsi:noNamespaceSchemaLocation": SCHEMA_LOCATION,
        },
    )

    info = ET.SubElement(root, "info")
    ET.SubElement(info, "name").text = descriptor.name
    _text_element(info, "display-name", descriptor.display_name)
    ET.SubElement(info, "version").text = descriptor.version
    _text_element(info, "description", descriptor.description)
    _text_element(info, "download-url", descriptor.download_url)
    _text_element(info, "email", descriptor.email)
    if descriptor.vendor_name or descriptor.vendor_url or descriptor.vendor_logo:
        vendor = ET.SubElement(info, "vendor")
        _text_element(vendor, "name", descriptor.vendor_name)
        _text_element(vendor, "url", descriptor.vendor_url)
        _text_element(vendor, "logo", descriptor.vendor_logo)

    if descriptor.has_requirements:
        requirements = ET.SubElement(root, "requirements")
        if descriptor.minimum_build:
            requirements.set("min-build", descriptor.minimum_build)
        if descriptor.maximum_build:
            requirements.set("max-build", descriptor.maximum_build)

    deployment = {}
    _bool_attribute(deployment, "use-separate-classloader", descriptor.use_separate_classloader)
    _bool_attribute(deployment, "allow-runtime-reload", descriptor.allow_runtime_reload)
    _bool_attribute(
        deployment, "node-responsibilities-aware", descriptor.node_responsibilities_aware
    )
    if deployment:
        ET.SubElement(root, "deployment", deployment)

    if descriptor.parameters:
        parameters = ET.SubElement(root, "parameters")
        for name, value in descriptor.parameters.items():
            ET.SubElement(parameters, "parameter", {"name": name}).text = value

    if descriptor.has_dependencies:
        dependencies = ET.SubElement(root, "dependencies")
        for name in descriptor.plugin_dependencies:
            ET.SubElement(dependencies, "plugin", {"name": name})
        for name in descriptor.tool_dependencies:
            ET.SubElement(dependencies, "tool", {"name": name})

    ET.indent(root, space="    ")
    body = ET.tostring(root, encoding="unicode")
    return f'<?xml version="1.0" encoding="UTF-8"?>\n{body}\n'


def parse_descriptor(text: str) -> PluginDescriptor:
    """Parse ``teamcity-plugin.xml`` content into a descriptor.

    Raises:
        ValidationError: If the document is malformed or describes an
            invalid descriptor.
    """
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise ValidationError(f"Malformed plugin descriptor: {e}") from e

    if root.tag != "teamcity-plugin":
        raise ValidationError(f"Unexpected descriptor root element: {root.tag}")

    builder = DescriptorBuilder()
    info = root.find("info")
    if info is not None:
        builder.set("name", _child_text(info, "name"))
        builder.set("displayName", _child_text(info, "display-name"))
        builder.set("version", _child_text(info, "version"))
        builder.set("description", _child_text(info, "description"))
        builder.set("downloadUrl", _child_text(info, "download-url"))
        builder.set("email", _child_text(info, "email"))
        vendor = info.find("vendor")
        if vendor is not None:
            builder.set("vendorName", _child_text(vendor, "name"))
            builder.set("vendorUrl", _child_text(vendor, "url"))
            builder.set("vendorLogo", _child_text(vendor, "logo"))

    requirements = root.find("requirements")
    if requirements is not None:
        builder.set("minimumBuild", requirements.get("min-build", ""))
        builder.set("maximumBuild", requirements.get("max-build", ""))

    deployment = root.find("deployment")
    if deployment is not None:
        builder.set("useSeparateClassloader", _parse_bool(deployment.get("use-separate-classloader")))
        builder.set("allowRuntimeReload", _parse_bool(deployment.get("allow-runtime-reload")))
        builder.set(
            "nodeResponsibilitiesAware",
            _parse_bool(deployment.get("node-responsibilities-aware")),
        )

    for parameter in root.findall("parameters/parameter"):
        builder.parameter(parameter.get("name", ""), parameter.text or "")
    for plugin in root.findall("dependencies/plugin"):
        builder.plugin_dependency(plugin.get("name", ""))
    for tool in root.findall("dependencies/tool"):
        builder.tool_dependency(tool.get("name", ""))

    return builder.build()


def _text_element(parent: ET.Element, tag: str, value: str) -> None:
    if value:
        ET.SubElement(parent, tag).text = value


def _bool_attribute(attributes: dict, name: str, value: Optional[bool]) -> None:
    if value is not None:
        attributes[name] = "true" if value else "false"


def _child_text(parent: ET.Element, tag: str) -> str:
    child = parent.find(tag)
    if child is None or child.text is None:
        return ""
    return child.text.strip()


def _parse_bool(value: Optional[str]) -> Optional[bool]:
    if value is None:
        return None
    if value.lower() not in ("true", "false"):
        raise ValidationError(f"Invalid boolean value in descriptor: {value}")
    return value.lower() == "true"
