import pytest

from tcplugin.errors import ValidationError
from tcplugin.plugins.builder import DescriptorBuilder, build_descriptor
from tcplugin.plugins.descriptor import PluginDescriptor


def test_build_descriptor_copies_all_fields(example_config):
    descriptor = build_descriptor(example_config)

    assert descriptor.name == "example"
    assert descriptor.display_name == "example"
    assert descriptor.version == "1.0-SNAPSHOT"
    assert descriptor.vendor_name == "Example Vendor"
    assert descriptor.vendor_url == "http://example.com"
    assert descriptor.description == "TeamCity Example Server Plugin"
    assert descriptor.download_url == "https://github.com/rodm/gradle-teamcity-plugin/"
    assert descriptor.email == "rod.n.mackenzie@gmail.com"
    assert descriptor.use_separate_classloader is True
    assert descriptor.parameters == {"param": "example server value"}


def test_optional_values_default_to_unset():
    descriptor = build_descriptor({"name": "minimal", "version": "0.1"})

    assert descriptor.display_name == ""
    assert descriptor.use_separate_classloader is None
    assert descriptor.parameters == {}
    assert not descriptor.has_requirements
    assert not descriptor.has_dependencies
    assert descriptor.default_archive_name == "minimal-0.1.zip"


@pytest.mark.parametrize("field", ["name", "version"])
@pytest.mark.parametrize("value", ["", "   ", None])
def test_empty_name_or_version_is_rejected(example_config, field, value):
    example_config[field] = value
    with pytest.raises(ValidationError):
        build_descriptor(example_config)


def test_missing_version_is_rejected():
    with pytest.raises(ValidationError, match="version"):
        build_descriptor({"name": "example"})


def test_duplicate_parameter_pairs_are_rejected():
    config = {
        "name": "example",
        "version": "1.0",
        "parameters": [("param", "one"), ("param", "two")],
    }
    with pytest.raises(ValidationError, match="Duplicate parameter: param"):
        build_descriptor(config)


def test_duplicate_parameter_objects_are_rejected():
    config = {
        "name": "example",
        "version": "1.0",
        "parameters": [
            {"name": "param", "value": "one"},
            {"name": "param", "value": "two"},
        ],
    }
    with pytest.raises(ValidationError):
        build_descriptor(config)


def test_builder_rejects_duplicate_parameter():
    builder = DescriptorBuilder().set("name", "example").set("version", "1.0")
    builder.parameter("param", "one")
    with pytest.raises(ValidationError):
        builder.parameter("param", "two")


def test_builder_chains_and_stringifies_values():
    descriptor = (
        DescriptorBuilder()
        .set("name", "example")
        .set("version", "1.0")
        .parameter("retries", 3)
        .plugin_dependency("other-plugin")
        .tool_dependency("maven")
        .build()
    )

    assert descriptor.parameters == {"retries": "3"}
    assert descriptor.plugin_dependencies == ("other-plugin",)
    assert descriptor.tool_dependencies == ("maven",)


def test_unknown_option_is_rejected(example_config):
    example_config["archiveName"] = "teamcity-plugin.zip"
    with pytest.raises(ValidationError, match="archiveName"):
        build_descriptor(example_config)


def test_boolean_option_requires_boolean(example_config):
    example_config["useSeparateClassloader"] = "yes"
    with pytest.raises(ValidationError, match="boolean"):
        build_descriptor(example_config)


def test_empty_parameter_name_is_rejected():
    with pytest.raises(ValidationError):
        build_descriptor({"name": "example", "version": "1.0", "parameters": {"": "x"}})


def test_dependencies_option():
    descriptor = build_descriptor(
        {
            "name": "example",
            "version": "1.0",
            "dependencies": {"plugins": ["base-plugin"], "tools": ["ant"]},
        }
    )
    assert descriptor.plugin_dependencies == ("base-plugin",)
    assert descriptor.tool_dependencies == ("ant",)


def test_unknown_dependency_kind_is_rejected():
    with pytest.raises(ValidationError):
        build_descriptor(
            {"name": "example", "version": "1.0", "dependencies": {"agents": ["x"]}}
        )


def test_descriptor_is_immutable(example_config):
    descriptor = build_descriptor(example_config)
    with pytest.raises(AttributeError):
        descriptor.name = "other"


def test_descriptor_collections_are_read_only():
    descriptor = build_descriptor(
        {
            "name": "example",
            "version": "1.0",
            "parameters": {"param": "value"},
            "dependencies": {"plugins": ["base"], "tools": ["maven"]},
        }
    )

    with pytest.raises(TypeError):
        descriptor.parameters["param"] = "changed"
    with pytest.raises(TypeError):
        descriptor.parameters[""] = "x"
    with pytest.raises(AttributeError):
        descriptor.plugin_dependencies.append("other")
    assert descriptor.parameters == {"param": "value"}


def test_descriptor_copies_caller_parameters():
    parameters = {"param": "value"}
    descriptor = PluginDescriptor(name="example", version="1.0", parameters=parameters)

    parameters["param"] = "changed"

    assert descriptor.parameters["param"] == "value"


def test_to_dict_returns_plain_values(example_config):
    data = build_descriptor(example_config).to_dict()

    assert data["parameters"] == {"param": "example server value"}
    assert type(data["parameters"]) is dict
    assert data["plugin_dependencies"] == []
    assert data["use_separate_classloader"] is True


@pytest.mark.parametrize("parameters", [5, "param=value", True])
def test_non_sequence_parameters_are_rejected(parameters):
    with pytest.raises(ValidationError, match="mapping or a list"):
        build_descriptor({"name": "example", "version": "1.0", "parameters": parameters})


@pytest.mark.parametrize(
    "dependencies",
    [
        {"plugins": None},
        {"plugins": "abc"},
        {"tools": 5},
        {"tools": ["maven", 3]},
        {"plugins": [""]},
    ],
)
def test_malformed_dependencies_are_rejected(dependencies):
    with pytest.raises(ValidationError, match="list of names"):
        build_descriptor({"name": "example", "version": "1.0", "dependencies": dependencies})
