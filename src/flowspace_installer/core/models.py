from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from flowspace_installer.bootstrap.platform import PlatformTarget

LATEST = "latest"
LATEST_INCLUDING_PRERELEASE = "latest-including-prerelease"


class SelectorKind(str, Enum):
    """How the version to install is chosen."""

    EXPLICIT = "explicit"
    LATEST = LATEST
    LATEST_INCLUDING_PRERELEASE = LATEST_INCLUDING_PRERELEASE


@dataclass(frozen=True)
class VersionSelector:
    """User's choice of which version to install."""

    kind: SelectorKind
    tag: Optional[str] = None

    @classmethod
    def parse(cls, value: Optional[str], *, include_prerelease: bool = False) -> "VersionSelector":
        """Build a selector from a version string and the pre-release flag.

        Empty values and ``latest`` select the newest release; anything else
        is taken verbatim as a release tag.
        """
        value = (value or "").strip()
        if value in ("", LATEST, LATEST_INCLUDING_PRERELEASE):
            if include_prerelease or value == LATEST_INCLUDING_PRERELEASE:
                return cls(SelectorKind.LATEST_INCLUDING_PRERELEASE)
            return cls(SelectorKind.LATEST)
        return cls(SelectorKind.EXPLICIT, value)

    @property
    def is_explicit(self) -> bool:
        return self.kind == SelectorKind.EXPLICIT

    def __str__(self) -> str:
        return self.tag if self.tag else self.kind.value


@dataclass(frozen=True)
class ResolvedVersion:
    """Concrete release tag chosen for installation."""

    tag: str
    is_prerelease: bool = False

    def __post_init__(self) -> None:
        if not self.tag or not self.tag.strip():
            raise ValueError("Resolved version tag must be non-empty")

    @property
    def number(self) -> str:
        """Tag without a leading ``v`` (``v2.3.1`` -> ``2.3.1``)."""
        return self.tag[1:] if self.tag.startswith("v") else self.tag


@dataclass(frozen=True)
class ArtifactDescriptor:
    """File names of a release artifact for one platform.

    Attributes:
        archive_name: Name of the downloadable archive.
        binary_in_archive: Name of the binary inside the archive.
        installed_name: Name of the binary once installed.
    """

    archive_name: str
    binary_in_archive: str
    installed_name: str

    @classmethod
    def for_target(
        cls, component: str, version: ResolvedVersion, target: "PlatformTarget"
    ) -> "ArtifactDescriptor":
        """Apply the release naming convention.

        Example: ``flowspace-v1.2.0-linux-amd64.tar.gz`` containing
        ``flowspace-linux-amd64``.
        """
        windows = target.os == "windows"
        extension = "zip" if windows else "tar.gz"
        exe = ".exe" if windows else ""
        return cls(
            archive_name=f"{component}-v{version.number}-{target.slug}.{extension}",
            binary_in_archive=f"{component}-{target.slug}{exe}",
            installed_name=f"{component}{exe}",
        )


class DigestSource(str, Enum):
    """Where an expected digest came from."""

    RELEASE_METADATA = "release-metadata"
    CHECKSUMS_MANIFEST = "checksums-manifest"
    LOCAL_MANIFEST = "local-manifest"
    NONE = "none"


@dataclass(frozen=True)
class IntegrityRecord:
    """Expected SHA-256 digest for an artifact, if one was published."""

    expected_digest: Optional[str]
    source: DigestSource

    @classmethod
    def missing(cls) -> "IntegrityRecord":
        return cls(expected_digest=None, source=DigestSource.NONE)

    @property
    def has_digest(self) -> bool:
        return self.source != DigestSource.NONE and bool(self.expected_digest)


class InstallStatus(str, Enum):
    """Final state of a pipeline run."""

    INSTALLED = "installed"
    ALREADY_INSTALLED = "already-installed"


@dataclass(frozen=True)
class InstallOutcome:
    """Result reported back to the CLI."""

    status: InstallStatus
    binary_path: Path
    version: Optional[str] = None
    digest_source: DigestSource = DigestSource.NONE
    on_path: bool = True
