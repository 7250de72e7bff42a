"""Pipeline executor for orchestrating install stages."""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Callable, List, Optional

from flowspace_installer.bootstrap.host import HostAdapter, current_host
from flowspace_installer.bootstrap.paths import InstallPaths
from flowspace_installer.bootstrap.platform import PlatformTarget, get_platform_target
from flowspace_installer.config.models import InstallerConfig
from flowspace_installer.core.logging import get_logger
from flowspace_installer.core.models import ArtifactDescriptor, InstallOutcome, InstallStatus
from flowspace_installer.install.installer import Installer
from flowspace_installer.install.integrity import verify
from flowspace_installer.install.preflight import PreflightCheck, default_checks
from flowspace_installer.install.state import InstallStateGuard
from flowspace_installer.release.checksums import ChecksumProvider
from flowspace_installer.release.credentials import GitCredentialResolver
from flowspace_installer.release.fetcher import ArtifactFetcher
from flowspace_installer.release.http import HttpClient
from flowspace_installer.release.resolver import ReleaseResolver

LOGGER = get_logger(__name__)

SCRATCH_PREFIX = "flowspace-install-"


class InstallPipeline:
    """Orchestrates the install stages.

    Pipeline stages:
    1. Install-state guard (no network)
    2. Platform detection and pre-flight checks
    3. Version resolution
    4. Digest lookup and archive fetch into a scratch directory
    5. Integrity verification
    6. Extraction and placement of the binary

    The scratch directory is removed on every exit path. Collaborators are
    injectable so tests can replace the network and host.
    """

    def __init__(
        self,
        config: InstallerConfig,
        http: Optional[HttpClient] = None,
        credentials: Optional[GitCredentialResolver] = None,
        host: Optional[HostAdapter] = None,
        guard: Optional[InstallStateGuard] = None,
        checks: Optional[List[PreflightCheck]] = None,
        detect_platform: Callable[[], PlatformTarget] = get_platform_target,
    ) -> None:
        self.config = config
        self.host = host or current_host()
        self.http = http or HttpClient()
        self.credentials = credentials or GitCredentialResolver(
            enabled=config.use_credentials,
            git_executable=self.host.git_executable,
        )
        self.guard = guard or InstallStateGuard()
        self.checks = default_checks() if checks is None else checks
        self.detect_platform = detect_platform

        endpoints = config.endpoints
        self.resolver = ReleaseResolver(endpoints, self.http, self.credentials)
        self.checksums = ChecksumProvider(endpoints, self.http, self.credentials, self.host)
        self.fetcher = ArtifactFetcher(endpoints, self.http, self.credentials, self.host)
        self.installer = Installer(self.host)

    def run(self) -> InstallOutcome:
        """Execute the full pipeline.

        Returns:
            InstallOutcome describing what happened.

        Raises:
            InstallerError: On any fatal stage failure.
        """
        config = self.config
        paths = InstallPaths(config.install_dir, self.host.executable_name(config.binary_name))

        decision = self.guard.check(paths.binary_path, config.selector, config.force)
        if not decision.proceed:
            LOGGER.info(f"{config.binary_name} {decision.installed_version} is already installed")
            return InstallOutcome(
                status=InstallStatus.ALREADY_INSTALLED,
                binary_path=paths.binary_path,
                version=decision.installed_version,
                on_path=paths.is_on_path(),
            )
        LOGGER.debug(f"Proceeding with install ({decision.reason})")

        target = self.detect_platform()
        LOGGER.info(f"Detected platform: {target.slug}")

        if config.skip_preflight:
            LOGGER.debug("Skipping pre-flight checks")
        else:
            for check in self.checks:
                LOGGER.debug(f"Running pre-flight check: {check.name}")
                check.run(config, target)

        version = self.resolver.resolve(config.selector)
        LOGGER.info(f"Installing version: {version.tag}")
        descriptor = ArtifactDescriptor.for_target(config.binary_name, version, target)

        with tempfile.TemporaryDirectory(prefix=SCRATCH_PREFIX) as tmp:
            scratch_dir = Path(tmp)
            record = self.checksums.get_digest(version, descriptor.archive_name, config.base_url)
            archive = self.fetcher.fetch(
                version, descriptor.archive_name, target, scratch_dir, config.base_url
            )
            verify(archive, record)
            binary_path = self.installer.install(
                archive, descriptor, config.install_dir, scratch_dir
            )

        on_path = InstallPaths(config.install_dir, descriptor.installed_name).is_on_path()
        if not on_path:
            LOGGER.debug(f"{config.install_dir} is not on PATH")

        return InstallOutcome(
            status=InstallStatus.INSTALLED,
            binary_path=binary_path,
            version=version.tag,
            digest_source=record.source,
            on_path=on_path,
        )
