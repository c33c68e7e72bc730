import json
import os
import zipfile

import pytest

EXAMPLE_DESCRIPTOR = {
    "name": "example",
    "displayName": "example",
    "version": "1.0-SNAPSHOT",
    "vendorName": "Example Vendor",
    "vendorUrl": "http://example.com",
    "description": "TeamCity Example Server Plugin",
    "downloadUrl": "https://github.com/rodm/gradle-teamcity-plugin/",
    "email": "rod.n.mackenzie@gmail.com",
    "useSeparateClassloader": True,
    "parameters": {"param": "example server value"},
}


@pytest.fixture(autouse=True)
def _isolated_environment(tmp_path, monkeypatch):
    """Keep settings independent of the developer's environment and .env."""
    for key in list(os.environ):
        if key.upper().startswith("TCPLUGIN_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    yield


@pytest.fixture
def example_config():
    return json.loads(json.dumps(EXAMPLE_DESCRIPTOR))


def write_jar(path, entries):
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w") as jar:
        for name, content in entries.items():
            jar.writestr(name, content)
    return path


@pytest.fixture
def server_jar(tmp_path):
    return write_jar(
        tmp_path / "artifacts" / "example-server.jar",
        {
            "META-INF/build-server-plugin-example.xml": "<beans/>",
            "example/Plugin.class": "compiled",
        },
    )


def make_project(root, name, config, server_entries=None, agent_files=None):
    project = root / name
    project.mkdir(parents=True)
    (project / "teamcity-plugin.json").write_text(json.dumps(config), encoding="utf-8")
    if server_entries is not None:
        write_jar(project / "server" / f"{name}-server.jar", server_entries)
    for file_name, content in (agent_files or {}).items():
        agent_dir = project / "agent"
        agent_dir.mkdir(exist_ok=True)
        (agent_dir / file_name).write_bytes(content)
    return project


@pytest.fixture
def example_project(tmp_path, example_config):
    return make_project(
        tmp_path / "projects",
        "example",
        {"archiveName": "teamcity-plugin.zip", "descriptor": example_config},
        server_entries={"META-INF/build-server-plugin-example.xml": "<beans/>"},
        agent_files={"example-agent.zip": b"agent"},
    )
