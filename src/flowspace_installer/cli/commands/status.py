"""Status command implementation."""

from __future__ import annotations

from argparse import Namespace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from flowspace_installer.config.models import InstallerConfig

from flowspace_installer.bootstrap.host import current_host
from flowspace_installer.bootstrap.paths import InstallPaths
from flowspace_installer.bootstrap.platform import get_platform_target
from flowspace_installer.bootstrap.validation import ToolStatus, validate_binary
from flowspace_installer.cli.commands import Command
from flowspace_installer.cli.exit_codes import EXIT_SUCCESS
from flowspace_installer.core.errors import UnsupportedPlatformError
from flowspace_installer.install.state import read_installed_version


class StatusCommand(Command):
    """Shows the installed binary and environment information."""

    def __init__(self, version: str):
        """Initialize StatusCommand.

        Args:
            version: Current installer version string.
        """
        self._version = version

    @property
    def name(self) -> str:
        """Command identifier."""
        return "status"

    def execute(self, args: Namespace, config: "InstallerConfig") -> int:
        """Execute the status command.

        Makes no network requests.

        Returns:
            Exit code (always 0 for status).
        """
        host = current_host()
        paths = InstallPaths(config.install_dir, host.executable_name(config.binary_name))

        print(f"flowspace-install version: {self._version}")
        try:
            print(f"Platform: {get_platform_target().slug}")
        except UnsupportedPlatformError as e:
            print(f"Platform: unsupported ({e})")
        print(f"Repository: {config.repository}")
        print(f"Install directory: {config.install_dir}")
        print()

        status = validate_binary(paths.binary_path)
        if status == ToolStatus.MISSING:
            print(f"{config.binary_name}: not installed")
        elif status == ToolStatus.NOT_EXECUTABLE:
            print(f"{config.binary_name}: present but not executable ({paths.binary_path})")
        else:
            installed = read_installed_version(paths.binary_path) or "unknown version"
            print(f"{config.binary_name}: {installed} ({paths.binary_path})")

        on_path = "yes" if paths.is_on_path() else "no"
        print(f"Install directory on PATH: {on_path}")
        return EXIT_SUCCESS
