"""Plugin archive validation utilities.

Provide basic structure and content checks for packaged plugin archives.
Findings are reported as warnings: a TeamCity server can still load an
archive with, for example, an empty description, so validation never fails
the build.
"""

import fnmatch
import io
import zipfile
from pathlib import Path
from typing import List

from .descriptor import DESCRIPTOR_FILENAME, PluginDescriptor
from .writer import parse_descriptor
from ..base.loggable import Loggable
from ..errors import ValidationError

PLUGIN_DEFINITION_PATTERN = "META-INF/build-server-plugin*.xml"


class PluginArchiveValidator(Loggable):
    """Lightweight validator focused on archive structure and descriptor content.

    Performs quick checks on a packaged plugin:
    - Ensures ``teamcity-plugin.xml`` exists at the root and parses
    - Warns on empty recommended descriptor values
    - Ensures a server jar carries a Spring plugin definition file
    """

    def __init__(self):
        super().__init__()
        self.recommended_values = {
            "display-name": lambda d: d.display_name,
            "description": lambda d: d.description,
            "vendor name": lambda d: d.vendor_name,
        }

    def validate_archive(self, archive_path: Path) -> List[str]:
        """Validate a plugin archive and log each finding.

        Args:
            archive_path: Path to the plugin zip archive.

        Returns:
            List[str]: Warning messages; empty if no issue was found.
        """
        warnings = []

        try:
            with zipfile.ZipFile(archive_path) as archive:
                names = archive.namelist()
                if DESCRIPTOR_FILENAME not in names:
                    warnings.append(f"{archive_path.name}: missing {DESCRIPTOR_FILENAME}")
                else:
                    text = archive.read(DESCRIPTOR_FILENAME).decode("utf-8")
                    warnings.extend(self._check_descriptor(archive_path.name, text))

                warnings.extend(self._check_server_jars(archive_path.name, archive))

        except (OSError, zipfile.BadZipFile) as e:
            warnings.append(f"{archive_path.name}: cannot read archive: {e}")

        for warning in warnings:
            self.logger.warning(warning)
        return warnings

    def _check_descriptor(self, archive_name: str, text: str) -> List[str]:
        """Check descriptor content for missing recommended values."""
        try:
            descriptor = parse_descriptor(text)
        except ValidationError as e:
            return [f"{archive_name}: invalid {DESCRIPTOR_FILENAME}: {e}"]
        return self.check_descriptor_values(archive_name, descriptor)

    def check_descriptor_values(
        self, archive_name: str, descriptor: PluginDescriptor
    ) -> List[str]:
        """Return warnings for recommended descriptor values left empty."""
        issues = []
        for label, getter in self.recommended_values.items():
            if not getter(descriptor):
                issues.append(
                    f"{archive_name}: plugin descriptor does not define a value for {label}"
                )
        return issues

    def _check_server_jars(self, archive_name: str, archive: zipfile.ZipFile) -> List[str]:
        """Check that a server jar contains a plugin definition file.

        Archives without server jars (agent-only or resource-only plugins)
        are not reported.
        """
        jars = [
            name
            for name in archive.namelist()
            if name.startswith("server/") and name.endswith(".jar")
        ]
        if not jars:
            return []

        for jar_name in jars:
            try:
                with zipfile.ZipFile(io.BytesIO(archive.read(jar_name))) as jar:
                    if any(
                        fnmatch.fnmatch(name, PLUGIN_DEFINITION_PATTERN)
                        for name in jar.namelist()
                    ):
                        return []
            except zipfile.BadZipFile:
                self.logger.debug(f"Skipping unreadable jar {jar_name}")

        return [
            f"{archive_name}: no server jar contains a plugin definition file "
            f"matching {PLUGIN_DEFINITION_PATTERN}"
        ]
