"""Platform detection for release artifacts.

Detects OS and architecture to determine which archive to download.
"""

from __future__ import annotations

import platform
from dataclasses import dataclass
from typing import Optional

from flowspace_installer.core.errors import UnsupportedPlatformError

# Supported operating systems (lowercase)
SUPPORTED_OS = frozenset({"darwin", "linux", "windows"})

# Supported architectures (normalized)
SUPPORTED_ARCH = frozenset({"amd64", "arm64"})

# Architectures only published for Windows
WINDOWS_ONLY_ARCH = frozenset({"386"})

# Architecture normalization map
_ARCH_MAP = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "arm64": "arm64",
    "aarch64": "arm64",
}

_WINDOWS_ARCH_MAP = {
    "x86": "386",
    "i386": "386",
    "i686": "386",
}

# uname prefixes of POSIX emulation layers running on a Windows kernel
_WINDOWS_KERNEL_PREFIXES = ("cygwin", "mingw", "msys")

WINDOWS_GUIDANCE = (
    "Run the installer from a native Windows Python (PowerShell or cmd.exe) "
    "instead of a POSIX emulation shell."
)


def normalize_arch(machine: str, os_name: str = "linux") -> Optional[str]:
    """Normalize architecture string to standard form.

    Args:
        machine: Raw architecture string from platform.machine()
        os_name: Normalized OS; 32-bit x86 is only recognized on windows.

    Returns:
        Normalized architecture string or None if unknown.
    """
    key = machine.lower()
    if key in _ARCH_MAP:
        return _ARCH_MAP[key]
    if os_name == "windows":
        return _WINDOWS_ARCH_MAP.get(key)
    return None


def detect_os() -> str:
    """Detect the current operating system.

    Returns:
        Lowercase OS name (darwin, linux, windows).

    Raises:
        UnsupportedPlatformError: If the OS is not supported, or if a POSIX
            emulation layer on a Windows kernel is detected.
    """
    raw = platform.system()
    system = raw.lower()
    if system.startswith(_WINDOWS_KERNEL_PREFIXES):
        raise UnsupportedPlatformError(
            f"Windows kernel detected under {raw}; this environment is not supported.",
            hints=[WINDOWS_GUIDANCE],
        )
    if system not in SUPPORTED_OS:
        raise UnsupportedPlatformError(
            f"Unsupported operating system: {raw}. "
            f"Supported: {', '.join(sorted(SUPPORTED_OS))}"
        )
    return system


def detect_arch(os_name: str) -> str:
    """Detect the current CPU architecture.

    Args:
        os_name: Normalized OS name the architecture will be paired with.

    Returns:
        Normalized architecture string (amd64, arm64, or 386 on windows).

    Raises:
        UnsupportedPlatformError: If the architecture is not supported.
    """
    machine = platform.machine()
    normalized = normalize_arch(machine, os_name)
    if normalized is None:
        supported = set(SUPPORTED_ARCH)
        if os_name == "windows":
            supported |= WINDOWS_ONLY_ARCH
        raise UnsupportedPlatformError(
            f"Unsupported architecture: {machine or 'unknown'}. "
            f"Supported: {', '.join(sorted(supported))}"
        )
    return normalized


@dataclass(frozen=True)
class PlatformTarget:
    """Canonical platform pair used in artifact names.

    Attributes:
        os: Operating system (darwin, linux, windows).
        arch: CPU architecture (amd64, arm64, 386).
    """

    os: str
    arch: str

    @property
    def slug(self) -> str:
        """Return the artifact name suffix for this platform.

        Example: "darwin-arm64", "linux-amd64"
        """
        return f"{self.os}-{self.arch}"

    def is_supported(self) -> bool:
        """Check if this platform is supported."""
        if self.os not in SUPPORTED_OS:
            return False
        if self.arch in WINDOWS_ONLY_ARCH:
            return self.os == "windows"
        return self.arch in SUPPORTED_ARCH


def get_platform_target() -> PlatformTarget:
    """Detect and return the current platform target.

    Raises:
        UnsupportedPlatformError: If the platform is not supported.
    """
    os_name = detect_os()
    return PlatformTarget(os=os_name, arch=detect_arch(os_name))
