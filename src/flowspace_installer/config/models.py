"""Configuration data model for the installer."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from flowspace_installer.bootstrap.paths import get_default_install_dir
from flowspace_installer.core.models import SelectorKind, VersionSelector
from flowspace_installer.release.endpoints import (
    DEFAULT_API_URL,
    DEFAULT_DOWNLOAD_URL,
    ReleaseEndpoints,
)

DEFAULT_REPOSITORY = "AI-Substrate/flowspace"
DEFAULT_BINARY_NAME = "flowspace"


@dataclass(frozen=True)
class InstallerConfig:
    """Settings for one installer run.

    Built once by ``load_config`` and passed to every component; nothing
    downstream reads the process environment for configuration.

    Attributes:
        repository: ``owner/name`` of the repository publishing releases.
        binary_name: Component name used in artifact and installed file names.
        selector: Which version to install.
        install_dir: Directory receiving the binary.
        base_url: Override location of archives and checksums (http(s) or file://).
        force: Reinstall even when the binary is already present.
        use_credentials: Look up a token with the git credential helper.
        skip_preflight: Skip the pre-flight host checks.
        api_url: Base URL of the releases API.
        download_url: Base URL serving release assets.
    """

    repository: str = DEFAULT_REPOSITORY
    binary_name: str = DEFAULT_BINARY_NAME
    selector: VersionSelector = field(
        default_factory=lambda: VersionSelector(SelectorKind.LATEST)
    )
    install_dir: Path = field(default_factory=get_default_install_dir)
    base_url: Optional[str] = None
    force: bool = False
    use_credentials: bool = True
    skip_preflight: bool = False
    api_url: str = DEFAULT_API_URL
    download_url: str = DEFAULT_DOWNLOAD_URL

    @property
    def endpoints(self) -> ReleaseEndpoints:
        return ReleaseEndpoints(
            repository=self.repository,
            api_url=self.api_url,
            download_url=self.download_url,
        )
