"""
Command-line interface for tcplugin.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import zipfile
from pathlib import Path

from . import __version__
from .api.routes import create_project_manager
from .config.settings import Settings
from .environment.deploy import deploy_plugins
from .environment.docker import DockerEnvironment
from .errors import PluginError
from .main import TcPluginApplication, setup_logging
from .plugins.descriptor import DESCRIPTOR_FILENAME
from .plugins.project import load_project
from .plugins.validator import PluginArchiveValidator
from .plugins.writer import parse_descriptor

logger = logging.getLogger("tcplugin.cli")


def build_cli_parser() -> argparse.ArgumentParser:
    cli = argparse.ArgumentParser(prog="tcplugin", description="TeamCity server plugin packager")
    cli.add_argument("--version", action="version", version=f"tcplugin {__version__}")
    cli.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = cli.add_subparsers(dest="command", required=True)

    descriptor_cmd = sub.add_parser("descriptor", help="Print a project's teamcity-plugin.xml")
    descriptor_cmd.add_argument("project", type=Path)

    package_cmd = sub.add_parser("package", help="Package a plugin project")
    package_cmd.add_argument("project", type=Path)
    package_cmd.add_argument("--output-dir", help="Directory receiving the archive")
    package_cmd.add_argument("--archive-name", help="Archive file name")
    package_cmd.add_argument(
        "--no-overwrite", action="store_true", help="Fail if the archive already exists"
    )

    build_cmd = sub.add_parser("build-all", help="Package every project in a directory")
    build_cmd.add_argument("--projects-dir", help="Directory containing plugin projects")
    build_cmd.add_argument("--output-dir", help="Directory receiving the archives")

    validate_cmd = sub.add_parser("validate", help="Check a packaged plugin archive")
    validate_cmd.add_argument("archive", type=Path)

    inspect_cmd = sub.add_parser("inspect", help="Show the descriptor of a plugin archive")
    inspect_cmd.add_argument("archive", type=Path)

    deploy_cmd = sub.add_parser("deploy", help="Copy archives to the TeamCity plugins directory")
    deploy_cmd.add_argument("archives", nargs="*", type=Path)
    deploy_cmd.add_argument("--data-dir", help="TeamCity data directory")

    server_cmd = sub.add_parser("server", help="Control the Docker TeamCity server")
    server_cmd.add_argument("action", choices=["start", "stop"])

    agent_cmd = sub.add_parser("agent", help="Control the Docker TeamCity build agent")
    agent_cmd.add_argument("action", choices=["start", "stop"])

    sub.add_parser("serve", help="Run the HTTP build service")
    return cli


def _apply_overrides(settings: Settings, args: argparse.Namespace) -> None:
    for option in ("output_dir", "archive_name", "projects_dir", "data_dir"):
        value = getattr(args, option, None)
        if value is not None:
            setattr(settings, option, value)
    if getattr(args, "no_overwrite", False):
        settings.overwrite_archive = False
    if args.debug:
        settings.debug = True


def run_command(args: argparse.Namespace, settings: Settings) -> int:
    if args.command == "descriptor":
        manager = create_project_manager(settings)
        _, text = manager.resolve_descriptor(load_project(args.project))
        print(text, end="")
        return 0

    if args.command == "package":
        manager = create_project_manager(settings)
        build = manager.build_project(args.project)
        print(build.archive_path)
        return 0

    if args.command == "build-all":
        manager = create_project_manager(settings)
        manager.build_all()
        for archive in manager.get_archives():
            print(archive)
        return 1 if manager.failed_projects else 0

    if args.command == "validate":
        warnings = PluginArchiveValidator().validate_archive(args.archive)
        for warning in warnings:
            print(warning)
        if not warnings:
            print(f"{args.archive.name}: OK")
        return 0

    if args.command == "inspect":
        with zipfile.ZipFile(args.archive) as archive:
            text = archive.read(DESCRIPTOR_FILENAME).decode("utf-8")
        print(json.dumps(parse_descriptor(text).to_dict(), indent=2))
        return 0

    if args.command == "deploy":
        archives = args.archives or sorted(Path(settings.output_dir).glob("*.zip"))
        for path in deploy_plugins(archives, settings.plugins_dir):
            print(path)
        return 0

    if args.command == "server":
        environment = DockerEnvironment.from_settings(settings)
        if args.action == "start":
            environment.start_server()
        else:
            environment.stop_server()
        return 0

    if args.command == "agent":
        environment = DockerEnvironment.from_settings(settings)
        if args.action == "start":
            environment.start_agent()
        else:
            environment.stop_agent()
        return 0

    if args.command == "serve":
        TcPluginApplication(settings).run()
        return 0

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: list[str] | None = None) -> int:
    cli = build_cli_parser()
    args = cli.parse_args(argv)

    setup_logging(args.debug)

    try:
        settings = Settings()
        _apply_overrides(settings, args)
        return run_command(args, settings)
    except PluginError as e:
        logger.error(str(e))
        return 1
    except (OSError, KeyError, ValueError, zipfile.BadZipFile) as e:
        logger.error(f"{args.command} failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
