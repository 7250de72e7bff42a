"""Installer configuration."""

from flowspace_installer.config.loader import ConfigError, load_config
from flowspace_installer.config.models import InstallerConfig

__all__ = ["ConfigError", "InstallerConfig", "load_config"]
