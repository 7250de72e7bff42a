"""Release version resolution.

Turns a version selector into a concrete release tag. Explicit tags are used
as given; ``latest`` selectors query the release host's API.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from flowspace_installer.core.errors import ResolutionError
from flowspace_installer.core.logging import get_logger
from flowspace_installer.core.models import ResolvedVersion, SelectorKind, VersionSelector
from flowspace_installer.release.auth import with_auth_fallback
from flowspace_installer.release.credentials import GitCredentialResolver
from flowspace_installer.release.endpoints import ReleaseEndpoints
from flowspace_installer.release.http import HttpClient, TransportError

LOGGER = get_logger(__name__)


class RepoVisibility(str, Enum):
    """Advisory classification of the repository."""

    PUBLIC = "public"
    PRIVATE = "private"
    UNKNOWN = "unknown"


def _tag_from_release(release: Any) -> Optional[ResolvedVersion]:
    if not isinstance(release, dict):
        return None
    tag = release.get("tag_name")
    if not isinstance(tag, str) or not tag.strip() or tag == "null":
        return None
    return ResolvedVersion(tag=tag.strip(), is_prerelease=bool(release.get("prerelease", False)))


class ReleaseResolver:
    """Resolves version selectors against the release host."""

    def __init__(
        self,
        endpoints: ReleaseEndpoints,
        client: HttpClient,
        credentials: GitCredentialResolver,
    ) -> None:
        self.endpoints = endpoints
        self.client = client
        self.credentials = credentials

    def _token(self) -> Optional[str]:
        return self.credentials.resolve_token(self.endpoints.credential_host)

    def classify_repository(self) -> RepoVisibility:
        """Classify the repository as public, private or unknown.

        Tries an anonymous metadata read, then an authenticated one. Used
        only to shape messages; never raises.
        """
        url = self.endpoints.repo_url()
        try:
            self.client.get_json(url)
            return RepoVisibility.PUBLIC
        except TransportError as e:
            LOGGER.debug(f"Anonymous repository lookup failed: {e}")

        token = self._token()
        if token:
            try:
                self.client.get_json(url, token=token)
                return RepoVisibility.PRIVATE
            except TransportError as e:
                LOGGER.debug(f"Authenticated repository lookup failed: {e}")

        return RepoVisibility.UNKNOWN

    def resolve(self, selector: VersionSelector) -> ResolvedVersion:
        """Determine the concrete version to install.

        Args:
            selector: Explicit tag, latest, or latest-including-prerelease.

        Returns:
            The resolved version.

        Raises:
            ResolutionError: If a latest selector cannot be resolved.
        """
        if selector.is_explicit:
            assert selector.tag is not None
            return ResolvedVersion(tag=selector.tag)

        include_prerelease = selector.kind == SelectorKind.LATEST_INCLUDING_PRERELEASE
        if include_prerelease:
            LOGGER.info("Fetching latest version (including pre-releases)...")
            url = self.endpoints.releases_url()
        else:
            LOGGER.info("Fetching latest version...")
            url = self.endpoints.latest_release_url()

        visibility = self.classify_repository()
        if visibility == RepoVisibility.PRIVATE:
            LOGGER.info("Detected private repository, using authenticated access")
        elif visibility == RepoVisibility.PUBLIC:
            LOGGER.info("Detected public repository")
        else:
            LOGGER.warning("Could not determine repository visibility")

        try:
            data = with_auth_fallback(
                lambda token: self.client.get_json(url, token=token),
                self._token(),
                "release lookup",
            )
        except TransportError as e:
            raise self._failure(f"Could not fetch the latest version: {e}", visibility) from e

        if include_prerelease:
            release = data[0] if isinstance(data, list) and data else None
        else:
            release = data

        resolved = _tag_from_release(release)
        if resolved is None:
            raise self._failure("Release host returned no usable release tag", visibility)

        LOGGER.info(f"Resolved {selector} to {resolved.tag}")
        return resolved

    def _failure(self, message: str, visibility: RepoVisibility) -> ResolutionError:
        repo = self.endpoints.repository
        hints = ["Pass an explicit version instead, e.g. --version v1.2.3"]
        if visibility != RepoVisibility.PUBLIC:
            hints.append(f"If {repo} is private, make sure you have access to it")
            hints.append("Check your stored Git credentials: git credential fill")
        return ResolutionError(f"{message} ({repo})", hints=hints)
