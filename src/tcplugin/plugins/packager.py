"""Packaging of TeamCity server plugins into zip archives.

The archive layout follows what the TeamCity server expects:

- ``teamcity-plugin.xml`` at the archive root
- server-side jars and resources under ``server/``
- agent plugin archives under ``agent/``

Archives are written to a temporary file next to the destination and moved
into place once complete, so a failed build leaves no partial archive.
"""

import os
import tempfile
import zipfile
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

from .descriptor import DESCRIPTOR_FILENAME, PluginDescriptor
from .validator import PluginArchiveValidator
from .writer import render_descriptor
from ..base.loggable import Loggable
from ..errors import PackagingError

PathLike = Union[str, os.PathLike]


def normalize_archive_name(archive_name: str) -> str:
    """Return the archive file name with a ``.zip`` suffix.

    Raises:
        PackagingError: If the name is empty or contains a path.
    """
    if not archive_name or not archive_name.strip():
        raise PackagingError("Archive name cannot be empty")
    if "/" in archive_name or "\\" in archive_name:
        raise PackagingError(f"Archive name must not contain a path: {archive_name}")
    if archive_name.endswith(".zip"):
        return archive_name
    return f"{archive_name}.zip"


class ArchivePackager(Loggable):
    """Write plugin archives from a descriptor and compiled artifacts.

    Args:
        overwrite: Default policy for an archive that already exists.
        validator: Optional validator run against each written archive.
            Its findings are logged as warnings and never fail the build.
    """

    def __init__(
        self,
        overwrite: bool = True,
        validator: Optional[PluginArchiveValidator] = None,
    ):
        super().__init__()
        self.overwrite = overwrite
        self.validator = validator

    def package(
        self,
        descriptor: PluginDescriptor,
        archive_name: Optional[str] = None,
        output_dir: PathLike = ".",
        server_files: Iterable[PathLike] = (),
        agent_files: Iterable[PathLike] = (),
        overwrite: Optional[bool] = None,
    ) -> Path:
        """Serialize the descriptor and package it with the plugin artifacts.

        Args:
            descriptor: The validated plugin descriptor.
            archive_name: Archive file name, e.g. ``teamcity-plugin.zip``.
                Defaults to ``<name>-<version>.zip``.
            output_dir: Directory that receives the archive (created if
                missing).
            server_files: Files or directories placed under ``server/``.
            agent_files: Files or directories placed under ``agent/``.
            overwrite: Override the packager's overwrite policy.

        Returns:
            Path: Location of the written archive.

        Raises:
            PackagingError: On I/O failure or if the archive exists and
                overwriting is disabled.
        """
        self.logger.info(
            f"Packaging plugin {descriptor.name} v{descriptor.version}"
        )
        return self.package_descriptor_text(
            render_descriptor(descriptor),
            archive_name or descriptor.default_archive_name,
            output_dir,
            server_files=server_files,
            agent_files=agent_files,
            overwrite=overwrite,
        )

    def package_descriptor_text(
        self,
        descriptor_text: str,
        archive_name: str,
        output_dir: PathLike = ".",
        server_files: Iterable[PathLike] = (),
        agent_files: Iterable[PathLike] = (),
        overwrite: Optional[bool] = None,
    ) -> Path:
        """Package an already rendered ``teamcity-plugin.xml``.

        See `package()` for arguments and errors.
        """
        overwrite = self.overwrite if overwrite is None else overwrite
        output_path = Path(output_dir)
        archive_path = output_path / normalize_archive_name(archive_name)

        if archive_path.exists() and not overwrite:
            raise PackagingError(f"Archive already exists: {archive_path}")

        entries = self._collect_entries("server", server_files)
        entries += self._collect_entries("agent", agent_files)
        self._check_duplicates(entries)

        try:
            output_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PackagingError(f"Cannot create output directory {output_path}: {e}") from e

        self._write_archive(archive_path, descriptor_text, entries, overwrite)
        self.logger.info(f"Wrote plugin archive: {archive_path} ({len(entries)} artifacts)")

        if self.validator:
            self.validator.validate_archive(archive_path)

        return archive_path

    def _collect_entries(
        self, prefix: str, sources: Iterable[PathLike]
    ) -> List[Tuple[Path, str]]:
        """Resolve files and directories into ``(source, arcname)`` pairs."""
        entries = []
        for source in sources:
            path = Path(source)
            if path.is_dir():
                for file_path in sorted(p for p in path.rglob("*") if p.is_file()):
                    relative = file_path.relative_to(path).as_posix()
                    entries.append((file_path, f"{prefix}/{relative}"))
            elif path.is_file():
                entries.append((path, f"{prefix}/{path.name}"))
            else:
                raise PackagingError(f"Plugin artifact not found: {path}")
        return entries

    @staticmethod
    def _check_duplicates(entries: List[Tuple[Path, str]]) -> None:
        seen = set()
        for _, arcname in entries:
            if arcname in seen:
                raise PackagingError(f"Duplicate archive entry: {arcname}")
            seen.add(arcname)

    def _write_archive(
        self,
        archive_path: Path,
        descriptor_text: str,
        entries: List[Tuple[Path, str]],
        overwrite: bool,
    ) -> None:
        """Write the archive atomically.

        Without `overwrite` the archive is hard-linked into place, which fails
        if another file appeared at the destination meanwhile.
        """
        temp_name = None
        try:
            fd, temp_name = tempfile.mkstemp(
                prefix=f".{archive_path.name}.", suffix=".tmp", dir=archive_path.parent
            )
            with os.fdopen(fd, "wb") as handle:
                with zipfile.ZipFile(
                    handle, "w", zipfile.ZIP_DEFLATED, strict_timestamps=False
                ) as archive:
                    archive.writestr(DESCRIPTOR_FILENAME, descriptor_text)
                    for source, arcname in entries:
                        self.logger.debug(f"Adding {source} as {arcname}")
                        archive.write(source, arcname)
            if overwrite:
                os.replace(temp_name, archive_path)
                temp_name = None
            else:
                os.link(temp_name, archive_path)
        except FileExistsError as e:
            raise PackagingError(f"Archive already exists: {archive_path}") from e
        except (OSError, ValueError) as e:
            raise PackagingError(f"Failed to write archive {archive_path}: {e}") from e
        finally:
            if temp_name and os.path.exists(temp_name):
                os.remove(temp_name)
