"""Expected-digest lookup for release artifacts.

Sources are tried in order: per-release asset metadata, the ``checksums.txt``
manifest published with the release, and a manifest next to an override base
URL. Finding nothing is a valid outcome and never raises.
"""

from __future__ import annotations

import re
from typing import Any, Optional

from flowspace_installer.bootstrap.host import HostAdapter, is_file_url
from flowspace_installer.core.logging import get_logger
from flowspace_installer.core.models import DigestSource, IntegrityRecord, ResolvedVersion
from flowspace_installer.release.auth import with_auth_fallback
from flowspace_installer.release.credentials import GitCredentialResolver
from flowspace_installer.release.endpoints import CHECKSUMS_MANIFEST, ReleaseEndpoints
from flowspace_installer.release.http import HttpClient, TransportError

LOGGER = get_logger(__name__)

_SHA256_HEX = re.compile(r"^[0-9a-f]{64}$")


def normalize_digest(value: Any) -> Optional[str]:
    """Lowercase a published digest and strip a ``sha256:`` prefix.

    A published but malformed digest is returned rather than dropped, so
    that verification rejects the artifact instead of skipping the check.

    Returns:
        The normalized digest, or None if nothing was published.
    """
    if not isinstance(value, str):
        return None
    digest = value.strip().lower()
    if digest.startswith("sha256:"):
        digest = digest[len("sha256:"):].strip()
    if not digest:
        return None
    if not _SHA256_HEX.match(digest):
        LOGGER.warning(f"Published checksum {value.strip()!r} is not a SHA-256 hex digest")
    return digest


def find_in_manifest(text: str, archive_name: str) -> Optional[str]:
    """Return the digest listed for ``archive_name`` in a checksums manifest.

    Accepts ``sha256sum`` output in text (``<hex>  <name>``) and binary
    (``<hex> *<name>``) modes. The file name must match exactly.
    """
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        parts = line.split(None, 1)
        if len(parts) != 2:
            continue
        digest, name = parts
        name = name.strip()
        if name.startswith("*"):
            name = name[1:]
        if name == archive_name:
            return normalize_digest(digest)
    return None


class ChecksumProvider:
    """Finds the published SHA-256 digest of a release archive."""

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

    def get_digest(
        self,
        version: ResolvedVersion,
        archive_name: str,
        base_url: Optional[str] = None,
    ) -> IntegrityRecord:
        """Look up the expected digest of ``archive_name``.

        Args:
            version: Release being installed.
            archive_name: Exact archive file name.
            base_url: Override base (http(s) or ``file://``), if any.

        Returns:
            An IntegrityRecord; ``source`` is ``none`` when nothing was found.
        """
        local = base_url is not None and is_file_url(base_url)

        if not local:
            digest = self._from_release_metadata(version, archive_name)
            if digest:
                return IntegrityRecord(digest, DigestSource.RELEASE_METADATA)

        if base_url is None:
            digest = self._from_remote_manifest(self.endpoints.checksums_url(version.tag), archive_name)
            if digest:
                return IntegrityRecord(digest, DigestSource.CHECKSUMS_MANIFEST)
        else:
            manifest_url = f"{base_url.rstrip('/')}/{CHECKSUMS_MANIFEST}"
            if local:
                digest = self._from_local_manifest(manifest_url, archive_name)
                if digest:
                    return IntegrityRecord(digest, DigestSource.LOCAL_MANIFEST)
            else:
                digest = self._from_remote_manifest(manifest_url, archive_name)
                if digest:
                    return IntegrityRecord(digest, DigestSource.CHECKSUMS_MANIFEST)

        LOGGER.debug(f"No published digest found for {archive_name}")
        return IntegrityRecord.missing()

    def _token_for(self, url: str) -> Optional[str]:
        if not self.endpoints.is_release_host(url) and not url.startswith(self.endpoints.api_url):
            return None
        return self.credentials.resolve_token(self.endpoints.credential_host)

    def _from_release_metadata(self, version: ResolvedVersion, archive_name: str) -> Optional[str]:
        url = self.endpoints.release_by_tag_url(version.tag)
        try:
            release = with_auth_fallback(
                lambda token: self.client.get_json(url, token=token),
                self._token_for(url),
                "release metadata lookup",
            )
        except TransportError as e:
            LOGGER.debug(f"Release metadata unavailable: {e}")
            return None

        assets = release.get("assets") if isinstance(release, dict) else None
        for asset in assets or []:
            if isinstance(asset, dict) and asset.get("name") == archive_name:
                digest = normalize_digest(asset.get("digest"))
                if digest:
                    LOGGER.info(f"Found checksum for {archive_name} in release metadata")
                return digest
        return None

    def _from_remote_manifest(self, url: str, archive_name: str) -> Optional[str]:
        try:
            body = with_auth_fallback(
                lambda token: self.client.get_bytes(url, token=token),
                self._token_for(url),
                "checksums download",
            )
        except TransportError as e:
            LOGGER.debug(f"Checksums manifest unavailable: {e}")
            return None
        digest = find_in_manifest(body.decode("utf-8", errors="replace"), archive_name)
        if digest:
            LOGGER.info(f"Found checksum for {archive_name} in {CHECKSUMS_MANIFEST}")
        return digest

    def _from_local_manifest(self, url: str, archive_name: str) -> Optional[str]:
        path = self.host.file_url_to_path(url)
        try:
            text = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            LOGGER.debug(f"Local checksums manifest unreadable: {e}")
            return None
        digest = find_in_manifest(text, archive_name)
        if digest:
            LOGGER.info(f"Found checksum for {archive_name} in {path}")
        return digest
