"""
Bootstrap module for host discovery.

This module handles:
- Platform detection (OS + architecture)
- Host-specific file operations (archives, permissions, file:// paths)
- Install directory management (~/.local/bin/)
- Installed binary validation
"""

from flowspace_installer.bootstrap.host import HostAdapter, get_host
from flowspace_installer.bootstrap.paths import InstallPaths, get_default_install_dir
from flowspace_installer.bootstrap.platform import PlatformTarget, get_platform_target
from flowspace_installer.bootstrap.validation import ToolStatus, validate_binary

__all__ = [
    "HostAdapter",
    "get_host",
    "InstallPaths",
    "get_default_install_dir",
    "PlatformTarget",
    "get_platform_target",
    "ToolStatus",
    "validate_binary",
]
