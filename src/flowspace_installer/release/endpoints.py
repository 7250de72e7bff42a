"""URL construction for the release host."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import quote

from flowspace_installer.release.auth import host_of

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_DOWNLOAD_URL = "https://github.com"

CHECKSUMS_MANIFEST = "checksums.txt"


@dataclass(frozen=True)
class ReleaseEndpoints:
    """Endpoints of one repository on a GitHub-compatible release host.

    Attributes:
        repository: ``owner/name`` repository identifier.
        api_url: Base URL of the REST API.
        download_url: Base URL serving release assets.
    """

    repository: str
    api_url: str = DEFAULT_API_URL
    download_url: str = DEFAULT_DOWNLOAD_URL

    @property
    def credential_host(self) -> str:
        """Host whose stored credential authenticates API and asset requests."""
        return host_of(self.download_url)

    def repo_url(self) -> str:
        return f"{self.api_url.rstrip('/')}/repos/{self.repository}"

    def latest_release_url(self) -> str:
        return f"{self.repo_url()}/releases/latest"

    def releases_url(self) -> str:
        return f"{self.repo_url()}/releases"

    def release_by_tag_url(self, tag: str) -> str:
        return f"{self.repo_url()}/releases/tags/{quote(tag, safe='')}"

    def asset_url(self, tag: str, name: str) -> str:
        base = self.download_url.rstrip("/")
        return f"{base}/{self.repository}/releases/download/{quote(tag, safe='')}/{name}"

    def checksums_url(self, tag: str) -> str:
        return self.asset_url(tag, CHECKSUMS_MANIFEST)

    def is_release_host(self, url: str) -> bool:
        """True when ``url`` is served by the release download host."""
        return host_of(url) == self.credential_host
