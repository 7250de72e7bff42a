"""Placing the verified binary into the install directory.

The archive is extracted into a private temporary directory. The binary is
then written to a hidden sibling file of its final path and moved into place,
so the final path never holds a partial file.
"""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path

from flowspace_installer.bootstrap.host import HostAdapter
from flowspace_installer.bootstrap.paths import InstallPaths
from flowspace_installer.core.errors import ExtractionError, InstallError
from flowspace_installer.core.logging import get_logger
from flowspace_installer.core.models import ArtifactDescriptor

LOGGER = get_logger(__name__)


class Installer:
    """Extracts an archive and installs the binary it contains."""

    def __init__(self, host: HostAdapter) -> None:
        self.host = host

    def install(
        self,
        archive: Path,
        descriptor: ArtifactDescriptor,
        install_dir: Path,
        scratch_dir: Path,
    ) -> Path:
        """Install the binary from a verified archive.

        Args:
            archive: Verified archive path.
            descriptor: Expected file names.
            install_dir: Target directory.
            scratch_dir: Run-owned directory for temporary extraction.

        Returns:
            Final path of the installed binary.

        Raises:
            ExtractionError: If the archive is unreadable or lacks the binary.
            InstallError: If the binary cannot be written.
        """
        paths = InstallPaths(install_dir, descriptor.installed_name)

        with tempfile.TemporaryDirectory(prefix="extract-", dir=scratch_dir) as tmp:
            extract_dir = Path(tmp)
            LOGGER.info(f"Extracting {archive.name}...")
            members = self.host.extract_archive(archive, extract_dir)

            binary = extract_dir / descriptor.binary_in_archive
            if not binary.is_file():
                contents = ", ".join(sorted(members)) or "(empty)"
                raise ExtractionError(
                    f"Binary {descriptor.binary_in_archive} not found in {archive.name}",
                    hints=[f"Archive contents: {contents}"],
                )

            try:
                paths.ensure_install_dir()
            except OSError as e:
                raise InstallError(
                    f"Cannot create install directory {install_dir}: {e}",
                    hints=["Choose a writable directory with --install-dir"],
                ) from e

            self._place(binary, paths.binary_path)

        LOGGER.info(f"Installed {paths.binary_path}")
        return paths.binary_path

    def _place(self, source: Path, final: Path) -> None:
        try:
            fd, staged_name = tempfile.mkstemp(dir=final.parent, prefix=f".{final.name}.", suffix=".tmp")
        except OSError as e:
            raise InstallError(f"Cannot write to {final.parent}: {e}") from e

        staged = Path(staged_name)
        try:
            with os.fdopen(fd, "wb") as out, open(source, "rb") as src:
                shutil.copyfileobj(src, out)
                out.flush()
                os.fsync(out.fileno())
            self.host.make_executable(staged)
            self.host.place_file(staged, final)
        except OSError as e:
            raise InstallError(f"Failed to install {final}: {e}") from e
        finally:
            staged.unlink(missing_ok=True)
