"""Host adapters for the operations that differ between POSIX and Windows.

One adapter is selected at startup from the detected OS and passed through
the pipeline; components never branch on the platform themselves.
"""

from __future__ import annotations

import os
import platform
import shutil
import tarfile
import zipfile
from abc import ABC, abstractmethod
from pathlib import Path, PurePosixPath, PureWindowsPath
from typing import List
from urllib.parse import unquote

from flowspace_installer.core.errors import ExtractionError
from flowspace_installer.core.logging import get_logger

LOGGER = get_logger(__name__)

FILE_SCHEME = "file://"

# Use the stdlib "data" extraction filter where the interpreter ships it
_TAR_EXTRACT_KWARGS = {"filter": "data"} if hasattr(tarfile, "data_filter") else {}


def is_file_url(url: str) -> bool:
    """Return True for ``file://`` sources."""
    return url.lower().startswith(FILE_SCHEME)


def _check_member_name(name: str, dest_dir: Path) -> None:
    """Reject archive members that would land outside ``dest_dir``."""
    normalized = name.replace("\\", "/")
    if normalized.startswith("/") or ".." in PurePosixPath(normalized).parts:
        raise ExtractionError(f"Unsafe path in archive: {name}")
    member_path = (dest_dir / normalized).resolve()
    if not member_path.is_relative_to(dest_dir.resolve()):
        raise ExtractionError(f"Path traversal detected: {name}")


class HostAdapter(ABC):
    """Operations whose behaviour depends on the host OS family."""

    @property
    @abstractmethod
    def os_family(self) -> str:
        """Normalized OS family this adapter serves."""

    @property
    @abstractmethod
    def archive_extension(self) -> str:
        """Archive extension used by releases for this host."""

    @property
    def executable_suffix(self) -> str:
        return ""

    @property
    def git_executable(self) -> str:
        return "git"

    def executable_name(self, component: str) -> str:
        """Installed file name of ``component`` on this host."""
        return f"{component}{self.executable_suffix}"

    @abstractmethod
    def file_url_to_path(self, url: str) -> Path:
        """Translate a ``file://`` URL to a local path."""

    @abstractmethod
    def make_executable(self, path: Path) -> None:
        """Mark ``path`` as executable."""

    def place_file(self, staged: Path, final: Path) -> None:
        """Move a fully written ``staged`` file onto ``final``.

        Both paths are in the same directory, so the rename is atomic.
        """
        os.replace(staged, final)

    def extract_archive(self, archive: Path, dest_dir: Path) -> List[str]:
        """Extract ``archive`` into ``dest_dir``.

        Args:
            archive: Path to a .tar.gz or .zip archive.
            dest_dir: Existing, empty directory to extract into.

        Returns:
            Names of the archive members.

        Raises:
            ExtractionError: If the archive is unreadable or unsafe.
        """
        try:
            if archive.name.lower().endswith(".zip"):
                return self._extract_zip(archive, dest_dir)
            return self._extract_tarball(archive, dest_dir)
        except ExtractionError:
            raise
        except (tarfile.TarError, zipfile.BadZipFile, OSError, EOFError) as e:
            raise ExtractionError(f"Failed to extract {archive.name}: {e}") from e

    def _extract_tarball(self, archive: Path, dest_dir: Path) -> List[str]:
        """Extract a .tar.gz archive."""
        with tarfile.open(archive, "r:*") as tar:
            members = tar.getmembers()
            for member in members:
                _check_member_name(member.name, dest_dir)
            for member in members:
                tar.extract(member, path=dest_dir, **_TAR_EXTRACT_KWARGS)
            return [member.name for member in members]

    def _extract_zip(self, archive: Path, dest_dir: Path) -> List[str]:
        """Extract a .zip archive."""
        with zipfile.ZipFile(archive, "r") as zf:
            names = zf.namelist()
            for name in names:
                _check_member_name(name, dest_dir)
            zf.extractall(path=dest_dir)
            return names


class PosixHost(HostAdapter):
    """Linux and macOS."""

    def __init__(self, os_family: str = "linux") -> None:
        self._os_family = os_family

    @property
    def os_family(self) -> str:
        return self._os_family

    @property
    def archive_extension(self) -> str:
        return "tar.gz"

    def file_url_to_path(self, url: str) -> Path:
        return Path(unquote(url[len(FILE_SCHEME):]))

    def make_executable(self, path: Path) -> None:
        path.chmod(path.stat().st_mode | 0o111)


class WindowsHost(HostAdapter):
    """Native Windows."""

    @property
    def os_family(self) -> str:
        return "windows"

    @property
    def archive_extension(self) -> str:
        return "zip"

    @property
    def executable_suffix(self) -> str:
        return ".exe"

    @property
    def git_executable(self) -> str:
        return "git.exe"

    def file_url_to_path(self, url: str) -> Path:
        raw = unquote(url[len(FILE_SCHEME):])
        # file:///C:/releases -> C:/releases
        if len(raw) >= 3 and raw[0] == "/" and raw[2] == ":":
            raw = raw[1:]
        return Path(str(PureWindowsPath(raw)))

    def make_executable(self, path: Path) -> None:
        # Executability follows the .exe suffix on Windows.
        return None

    def place_file(self, staged: Path, final: Path) -> None:
        try:
            os.replace(staged, final)
            return
        except PermissionError:
            LOGGER.debug(f"Rename onto {final} refused, overwriting in place")
        if staged.stat().st_size == 0:
            raise OSError(f"Staged copy {staged} is empty")
        shutil.copyfile(staged, final)
        if final.stat().st_size != staged.stat().st_size:
            raise OSError(f"Incomplete copy to {final}")
        staged.unlink()


def get_host(os_family: str) -> HostAdapter:
    """Select the adapter for a normalized OS name."""
    if os_family == "windows":
        return WindowsHost()
    return PosixHost(os_family)


def current_host() -> HostAdapter:
    """Adapter for the running interpreter, before the platform is validated."""
    if os.name == "nt":
        return WindowsHost()
    return PosixHost(platform.system().lower() or "linux")
