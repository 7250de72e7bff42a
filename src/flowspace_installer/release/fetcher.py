"""Artifact download into the run's scratch directory."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import List, Optional

from flowspace_installer.bootstrap.host import HostAdapter, is_file_url
from flowspace_installer.bootstrap.platform import PlatformTarget
from flowspace_installer.core.errors import TransferError
from flowspace_installer.core.logging import get_logger
from flowspace_installer.core.models import ResolvedVersion
from flowspace_installer.release.auth import with_auth_fallback
from flowspace_installer.release.credentials import GitCredentialResolver
from flowspace_installer.release.endpoints import ReleaseEndpoints
from flowspace_installer.release.http import OCTET_STREAM, HttpClient, TransportError

LOGGER = get_logger(__name__)


class ArtifactFetcher:
    """Downloads or copies release archives."""

    def __init__(
        self,
        endpoints: ReleaseEndpoints,
        client: HttpClient,
        credentials: GitCredentialResolver,
        host: HostAdapter,
    ) -> None:
        self.endpoints = endpoints
        self.client = client
        self.credentials = credentials
        self.host = host

    def source_url(self, version: ResolvedVersion, archive_name: str, base_url: Optional[str] = None) -> str:
        """Where ``archive_name`` is fetched from."""
        if base_url:
            return f"{base_url.rstrip('/')}/{archive_name}"
        return self.endpoints.asset_url(version.tag, archive_name)

    def fetch(
        self,
        version: ResolvedVersion,
        archive_name: str,
        target: PlatformTarget,
        dest_dir: Path,
        base_url: Optional[str] = None,
    ) -> Path:
        """Fetch an archive into ``dest_dir``.

        Args:
            version: Release being installed.
            archive_name: Archive file name.
            target: Platform the archive was built for (used in messages).
            dest_dir: Scratch directory owned by this run.
            base_url: Override base (http(s) or ``file://``), if any.

        Returns:
            Path to the local, non-empty archive.

        Raises:
            TransferError: If the archive cannot be obtained or is empty.
        """
        url = self.source_url(version, archive_name, base_url)
        dest_path = dest_dir / archive_name

        if is_file_url(url):
            self._copy_local(url, dest_path)
        else:
            self._download(url, dest_path, version, target)

        if not dest_path.is_file() or dest_path.stat().st_size == 0:
            dest_path.unlink(missing_ok=True)
            raise TransferError(f"Fetched file is empty or missing: {archive_name}")

        LOGGER.info(f"Fetched {archive_name}")
        return dest_path

    def _copy_local(self, url: str, dest_path: Path) -> None:
        source = self.host.file_url_to_path(url)
        LOGGER.info(f"Copying from local source: {source}")
        if not source.is_file():
            raise TransferError(f"Local file not found: {source}")
        try:
            shutil.copyfile(source, dest_path)
        except OSError as e:
            raise TransferError(f"Failed to copy {source}: {e}") from e

    def _download(self, url: str, dest_path: Path, version: ResolvedVersion, target: PlatformTarget) -> None:
        token = None
        if self.endpoints.is_release_host(url):
            token = self.credentials.resolve_token(self.endpoints.credential_host)

        def attempt(auth: Optional[str]) -> int:
            dest_path.unlink(missing_ok=True)
            try:
                return self.client.download(
                    url, dest_path, token=auth, accept=OCTET_STREAM if auth else None
                )
            except TransportError:
                dest_path.unlink(missing_ok=True)
                raise

        LOGGER.info(f"Downloading from: {url}")
        try:
            with_auth_fallback(attempt, token, "download")
        except TransportError as e:
            raise TransferError(
                f"Failed to download {dest_path.name}: {e}",
                hints=self._failure_hints(version, target),
            ) from e

    def _failure_hints(self, version: ResolvedVersion, target: PlatformTarget) -> List[str]:
        return [
            f"Check that release {version.tag} exists and publishes an artifact for {target.os}/{target.arch}",
            f"If {self.endpoints.repository} is private, make sure your Git credentials grant access to it",
        ]
