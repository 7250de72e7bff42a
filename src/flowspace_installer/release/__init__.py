"""
Release host access.

This module handles:
- Credential lookup via the git credential helper
- Version resolution against the releases API
- Published digest lookup (release metadata, checksums manifests)
- Archive download with authenticated-then-anonymous fallback
"""

from flowspace_installer.release.checksums import ChecksumProvider
from flowspace_installer.release.credentials import GitCredentialResolver
from flowspace_installer.release.endpoints import ReleaseEndpoints
from flowspace_installer.release.fetcher import ArtifactFetcher
from flowspace_installer.release.http import HttpClient, TransportError
from flowspace_installer.release.resolver import ReleaseResolver, RepoVisibility

__all__ = [
    "ArtifactFetcher",
    "ChecksumProvider",
    "GitCredentialResolver",
    "HttpClient",
    "ReleaseEndpoints",
    "ReleaseResolver",
    "RepoVisibility",
    "TransportError",
]
