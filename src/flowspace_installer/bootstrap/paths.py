"""Path management for the install target.

Handles the default install directory and the final binary location.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

# Default install directory, relative to the user's home
DEFAULT_INSTALL_SUBDIR = Path(".local") / "bin"

# Default location of the optional installer config file
DEFAULT_CONFIG_SUBPATH = Path(".config") / "flowspace" / "installer.yml"


def get_default_install_dir() -> Path:
    """Get the default install directory (``~/.local/bin`` on every platform)."""
    return Path.home() / DEFAULT_INSTALL_SUBDIR


def get_default_config_path() -> Path:
    """Get the default installer config file location."""
    return Path.home() / DEFAULT_CONFIG_SUBPATH


@dataclass(frozen=True)
class InstallPaths:
    """Locations touched by an install.

    Directory structure:
        <install_dir>/
            <binary>            - installed executable
            .<binary>.*.tmp     - staging file, only present mid-install
    """

    install_dir: Path
    binary_name: str

    @property
    def binary_path(self) -> Path:
        """Final path of the installed binary."""
        return self.install_dir / self.binary_name

    def ensure_install_dir(self) -> None:
        """Create the install directory if it doesn't exist."""
        self.install_dir.mkdir(parents=True, exist_ok=True)

    def is_on_path(self, path_env: Optional[str] = None) -> bool:
        """Check whether the install directory is listed in PATH.

        Args:
            path_env: PATH value to inspect (defaults to the process PATH).
        """
        value = os.environ.get("PATH", "") if path_env is None else path_env
        target = os.path.normcase(str(self.install_dir.expanduser().resolve()))
        for entry in value.split(os.pathsep):
            if not entry:
                continue
            candidate = os.path.normcase(str(Path(entry).expanduser().resolve()))
            if candidate == target:
                return True
        return False
