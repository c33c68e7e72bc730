import zipfile

from conftest import write_jar

from tcplugin.plugins.builder import build_descriptor
from tcplugin.plugins.packager import ArchivePackager
from tcplugin.plugins.validator import PluginArchiveValidator


def test_complete_archive_has_no_warnings(tmp_path, example_config, server_jar):
    archive = ArchivePackager().package(
        build_descriptor(example_config), "teamcity-plugin.zip", tmp_path, server_files=[server_jar]
    )
    assert PluginArchiveValidator().validate_archive(archive) == []


def test_missing_recommended_values_are_reported(tmp_path):
    archive = ArchivePackager().package(
        build_descriptor({"name": "bare", "version": "1.0"}), "bare.zip", tmp_path
    )

    warnings = PluginArchiveValidator().validate_archive(archive)

    assert warnings == [
        "bare.zip: plugin descriptor does not define a value for display-name",
        "bare.zip: plugin descriptor does not define a value for description",
        "bare.zip: plugin descriptor does not define a value for vendor name",
    ]


def test_server_jar_without_plugin_definition(tmp_path, example_config):
    jar = write_jar(tmp_path / "lib" / "plain.jar", {"example/Plugin.class": "compiled"})
    archive = ArchivePackager().package(
        build_descriptor(example_config), "teamcity-plugin.zip", tmp_path, server_files=[jar]
    )

    warnings = PluginArchiveValidator().validate_archive(archive)

    assert len(warnings) == 1
    assert "META-INF/build-server-plugin*.xml" in warnings[0]


def test_missing_descriptor_is_reported(tmp_path):
    archive = tmp_path / "broken.zip"
    with zipfile.ZipFile(archive, "w") as zf:
        zf.writestr("server/readme.txt", "no descriptor")

    warnings = PluginArchiveValidator().validate_archive(archive)

    assert warnings == ["broken.zip: missing teamcity-plugin.xml"]


def test_invalid_descriptor_is_reported(tmp_path):
    archive = tmp_path / "broken.zip"
    with zipfile.ZipFile(archive, "w") as zf:
        zf.writestr("teamcity-plugin.xml", "<teamcity-plugin>")

    warnings = PluginArchiveValidator().validate_archive(archive)

    assert len(warnings) == 1
    assert "invalid teamcity-plugin.xml" in warnings[0]


def test_unreadable_archive_is_reported(tmp_path):
    archive = tmp_path / "garbage.zip"
    archive.write_bytes(b"not a zip")

    warnings = PluginArchiveValidator().validate_archive(archive)

    assert "cannot read archive" in warnings[0]
