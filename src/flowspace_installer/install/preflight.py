"""Pre-flight checks run after platform detection and before network access."""

from __future__ import annotations

import os
import stat
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, List

from flowspace_installer.bootstrap.platform import PlatformTarget
from flowspace_installer.core.errors import EnvironmentCheckError
from flowspace_installer.core.logging import get_logger

if TYPE_CHECKING:
    from flowspace_installer.config.models import InstallerConfig

LOGGER = get_logger(__name__)

DOCKER_INFO_TIMEOUT = 10

_CONTAINER_MARKERS = ("docker", "kubepods", "containerd")


class PreflightCheck(ABC):
    """A host condition the installed tool depends on."""

    name: str = "preflight"

    @abstractmethod
    def run(self, config: "InstallerConfig", target: PlatformTarget) -> None:
        """Raise EnvironmentCheckError if the host is not suitable."""


class DockerAvailabilityCheck(PreflightCheck):
    """Requires a reachable Docker daemon."""

    name = "docker"

    def __init__(
        self,
        dockerenv: Path = Path("/.dockerenv"),
        cgroup: Path = Path("/proc/1/cgroup"),
        socket_path: Path = Path("/var/run/docker.sock"),
    ) -> None:
        self.dockerenv = dockerenv
        self.cgroup = cgroup
        self.socket_path = socket_path

    def in_container(self) -> bool:
        """Detect whether we are running inside a container."""
        if self.dockerenv.is_file():
            return True
        try:
            content = self.cgroup.read_text(errors="replace")
        except OSError:
            return False
        return any(marker in content for marker in _CONTAINER_MARKERS)

    def docker_available(self) -> bool:
        """Check if Docker is available and running."""
        try:
            if stat.S_ISSOCK(self.socket_path.stat().st_mode):
                return True
        except OSError:
            pass
        try:
            result = subprocess.run(
                ["docker", "info"],
                capture_output=True,
                text=True,
                timeout=DOCKER_INFO_TIMEOUT,
            )
            return result.returncode == 0
        except (subprocess.TimeoutExpired, OSError):
            return False

    def run(self, config: "InstallerConfig", target: PlatformTarget) -> None:
        in_container = self.in_container()
        if in_container:
            LOGGER.info("Detected container environment (likely devcontainer)")

        if self.docker_available():
            LOGGER.info("Docker environment validated")
            return

        if in_container:
            raise EnvironmentCheckError(
                "Running in a container but Docker is not accessible",
                hints=[
                    "For devcontainers, add either the 'docker-in-docker' or the "
                    "'docker-outside-of-docker' feature to devcontainer.json",
                ],
            )
        raise EnvironmentCheckError(
            "Docker is not installed or not running",
            hints=[
                "macOS/Windows: install Docker Desktop from https://docker.com/products/docker-desktop",
                "Linux: follow https://docs.docker.com/engine/install/",
                "Make sure Docker is running, then try again (or pass --skip-preflight)",
            ],
        )


def _is_privileged_dir(path: Path) -> bool:
    text = path.as_posix()
    return text.startswith("/usr/") or text in ("/usr", "/bin", "/sbin")


class PrivilegedDirectoryCheck(PreflightCheck):
    """Rejects system directories when not running as root."""

    name = "permissions"

    def run(self, config: "InstallerConfig", target: PlatformTarget) -> None:
        if target.os == "windows" or not hasattr(os, "geteuid"):
            return
        if not _is_privileged_dir(config.install_dir):
            return
        if os.geteuid() == 0:
            return
        raise EnvironmentCheckError(
            f"Installing to {config.install_dir} requires root privileges",
            hints=[
                f"Run with sudo: sudo FLOWSPACE_INSTALL_DIR={config.install_dir} flowspace-install",
                "Or use the default user install directory (~/.local/bin)",
            ],
        )


def default_checks() -> List[PreflightCheck]:
    return [DockerAvailabilityCheck(), PrivilegedDirectoryCheck()]
