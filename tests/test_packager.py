import os
import xml.etree.ElementTree as ET
import zipfile

import pytest

from tcplugin.errors import PackagingError
from tcplugin.plugins.builder import build_descriptor
from tcplugin.plugins.packager import ArchivePackager, normalize_archive_name
from tcplugin.plugins.validator import PluginArchiveValidator


def test_example_scenario_produces_archive(tmp_path, server_jar):
    descriptor = build_descriptor(
        {
            "name": "example",
            "version": "1.0-SNAPSHOT",
            "parameters": {"param": "example server value"},
        }
    )
    output_dir = tmp_path / "dist"

    archive_path = ArchivePackager().package(
        descriptor, "teamcity-plugin.zip", output_dir, server_files=[server_jar]
    )

    assert archive_path == output_dir / "teamcity-plugin.zip"
    assert [p.name for p in output_dir.iterdir()] == ["teamcity-plugin.zip"]
    with zipfile.ZipFile(archive_path) as archive:
        assert archive.namelist() == ["teamcity-plugin.xml", "server/example-server.jar"]
        root = ET.fromstring(archive.read("teamcity-plugin.xml"))
    assert root.findtext("info/name") == "example"
    assert root.findtext("info/version") == "1.0-SNAPSHOT"
    parameter = root.find("parameters/parameter")
    assert (parameter.get("name"), parameter.text) == ("param", "example server value")


def test_directories_are_packaged_recursively(tmp_path, example_config):
    server_dir = tmp_path / "server"
    (server_dir / "lib").mkdir(parents=True)
    (server_dir / "lib" / "dep.jar").write_bytes(b"dep")
    (server_dir / "plugin.jar").write_bytes(b"plugin")
    agent_zip = tmp_path / "example-agent.zip"
    agent_zip.write_bytes(b"agent")

    archive_path = ArchivePackager().package(
        build_descriptor(example_config),
        "teamcity-plugin.zip",
        tmp_path / "dist",
        server_files=[server_dir],
        agent_files=[agent_zip],
    )

    with zipfile.ZipFile(archive_path) as archive:
        assert archive.namelist() == [
            "teamcity-plugin.xml",
            "server/lib/dep.jar",
            "server/plugin.jar",
            "agent/example-agent.zip",
        ]


def test_default_archive_name(tmp_path, example_config):
    archive_path = ArchivePackager().package(build_descriptor(example_config), output_dir=tmp_path)
    assert archive_path.name == "example-1.0-SNAPSHOT.zip"


@pytest.mark.parametrize(
    "name, expected",
    [("teamcity-plugin.zip", "teamcity-plugin.zip"), ("teamcity-plugin", "teamcity-plugin.zip")],
)
def test_normalize_archive_name(name, expected):
    assert normalize_archive_name(name) == expected


@pytest.mark.parametrize("name", ["", "dist/plugin.zip", "..\\plugin.zip"])
def test_invalid_archive_name(name):
    with pytest.raises(PackagingError):
        normalize_archive_name(name)


def test_existing_archive_is_overwritten_by_default(tmp_path, example_config):
    existing = tmp_path / "teamcity-plugin.zip"
    existing.write_bytes(b"stale")

    ArchivePackager().package(build_descriptor(example_config), "teamcity-plugin.zip", tmp_path)

    assert zipfile.is_zipfile(existing)


def test_existing_archive_fails_without_overwrite(tmp_path, example_config):
    existing = tmp_path / "teamcity-plugin.zip"
    existing.write_bytes(b"stale")

    with pytest.raises(PackagingError, match="already exists"):
        ArchivePackager(overwrite=False).package(
            build_descriptor(example_config), "teamcity-plugin.zip", tmp_path
        )
    assert existing.read_bytes() == b"stale"


def test_unwritable_output_path_raises_packaging_error(tmp_path, example_config):
    blocker = tmp_path / "not-a-directory"
    blocker.write_text("file")

    with pytest.raises(PackagingError) as excinfo:
        ArchivePackager().package(
            build_descriptor(example_config), "teamcity-plugin.zip", blocker / "dist"
        )
    assert isinstance(excinfo.value.__cause__, OSError)


def test_missing_artifact_raises_packaging_error(tmp_path, example_config):
    with pytest.raises(PackagingError, match="not found"):
        ArchivePackager().package(
            build_descriptor(example_config),
            "teamcity-plugin.zip",
            tmp_path / "dist",
            server_files=[tmp_path / "missing.jar"],
        )
    assert not (tmp_path / "dist" / "teamcity-plugin.zip").exists()


def test_duplicate_entries_raise_packaging_error(tmp_path, example_config):
    first = tmp_path / "a" / "plugin.jar"
    second = tmp_path / "b" / "plugin.jar"
    for path in (first, second):
        path.parent.mkdir()
        path.write_bytes(b"jar")

    with pytest.raises(PackagingError, match="Duplicate archive entry"):
        ArchivePackager().package(
            build_descriptor(example_config),
            "teamcity-plugin.zip",
            tmp_path / "dist",
            server_files=[first, second],
        )


def test_failed_write_leaves_no_files(tmp_path, example_config, monkeypatch):
    output_dir = tmp_path / "dist"

    def broken_write(self, filename, arcname=None, *args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr(zipfile.ZipFile, "write", broken_write)
    artifact = tmp_path / "plugin.jar"
    artifact.write_bytes(b"jar")

    with pytest.raises(PackagingError, match="disk full"):
        ArchivePackager().package(
            build_descriptor(example_config),
            "teamcity-plugin.zip",
            output_dir,
            server_files=[artifact],
        )
    assert list(output_dir.iterdir()) == []


def test_validator_runs_after_packaging(tmp_path, caplog):
    descriptor = build_descriptor({"name": "bare", "version": "1.0"})

    ArchivePackager(validator=PluginArchiveValidator()).package(
        descriptor, "bare.zip", tmp_path
    )

    assert "does not define a value for display-name" in caplog.text


def test_artifacts_with_pre_1980_timestamps_are_packaged(tmp_path, example_config, server_jar):
    os.utime(server_jar, (0, 0))

    archive_path = ArchivePackager().package(
        build_descriptor(example_config),
        "teamcity-plugin.zip",
        tmp_path / "dist",
        server_files=[server_jar],
    )

    with zipfile.ZipFile(archive_path) as archive:
        assert archive.getinfo("server/example-server.jar").date_time[0] == 1980


def test_invalid_artifact_data_raises_packaging_error(tmp_path, example_config, monkeypatch):
    def rejecting_write(self, filename, arcname=None, *args, **kwargs):
        raise ValueError("ZIP does not support timestamps before 1980")

    monkeypatch.setattr(zipfile.ZipFile, "write", rejecting_write)
    artifact = tmp_path / "plugin.jar"
    artifact.write_bytes(b"jar")

    with pytest.raises(PackagingError, match="1980"):
        ArchivePackager().package(
            build_descriptor(example_config),
            "teamcity-plugin.zip",
            tmp_path / "dist",
            server_files=[artifact],
        )


def test_no_overwrite_keeps_archive_created_during_build(tmp_path, example_config, monkeypatch):
    output_dir = tmp_path / "dist"
    output_dir.mkdir()
    target = output_dir / "teamcity-plugin.zip"
    collect = ArchivePackager._collect_entries

    def collect_then_create(self, prefix, sources):
        target.write_bytes(b"concurrent")
        return collect(self, prefix, sources)

    monkeypatch.setattr(ArchivePackager, "_collect_entries", collect_then_create)

    with pytest.raises(PackagingError, match="already exists"):
        ArchivePackager(overwrite=False).package(
            build_descriptor(example_config), "teamcity-plugin.zip", output_dir
        )
    assert target.read_bytes() == b"concurrent"
    assert [p.name for p in output_dir.iterdir()] == ["teamcity-plugin.zip"]


def test_no_overwrite_writes_new_archive(tmp_path, example_config):
    archive_path = ArchivePackager(overwrite=False).package(
        build_descriptor(example_config), "teamcity-plugin.zip", tmp_path / "dist"
    )

    assert zipfile.is_zipfile(archive_path)
    assert [p.name for p in (tmp_path / "dist").iterdir()] == ["teamcity-plugin.zip"]
