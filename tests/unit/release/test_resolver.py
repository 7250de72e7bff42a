"""Tests for release version resolution."""

from __future__ import annotations

import pytest

from flowspace_installer.core.errors import ResolutionError
from flowspace_installer.core.models import SelectorKind, VersionSelector
from flowspace_installer.release.endpoints import ReleaseEndpoints
from flowspace_installer.release.resolver import ReleaseResolver, RepoVisibility
from helpers import FakeCredentials, FakeHttpClient, unauthorized

ENDPOINTS = ReleaseEndpoints("org/tool")
REPO = ENDPOINTS.repo_url()
LATEST = ENDPOINTS.latest_release_url()
RELEASES = ENDPOINTS.releases_url()


def _resolver(http: FakeHttpClient, token=None) -> ReleaseResolver:
    return ReleaseResolver(ENDPOINTS, http, FakeCredentials(token))


class TestExplicitSelector:
    def test_no_network(self) -> None:
        http = FakeHttpClient()
        resolved = _resolver(http, token="t").resolve(VersionSelector.parse("v9.9.9"))
        assert resolved.tag == "v9.9.9"
        assert resolved.is_prerelease is False
        assert http.calls == []


class TestLatest:
    def test_latest_release(self) -> None:
        http = FakeHttpClient({REPO: {}, LATEST: {"tag_name": "v2.3.1", "prerelease": False}})
        resolved = _resolver(http).resolve(VersionSelector.parse("latest"))
        assert resolved.tag == "v2.3.1"

    def test_latest_including_prerelease_takes_first_entry(self) -> None:
        http = FakeHttpClient({
            REPO: {},
            RELEASES: [
                {"tag_name": "v2.4.0-rc1", "prerelease": True},
                {"tag_name": "v2.3.1", "prerelease": False},
            ],
        })
        selector = VersionSelector(SelectorKind.LATEST_INCLUDING_PRERELEASE)
        resolved = _resolver(http).resolve(selector)
        assert resolved.tag == "v2.4.0-rc1"
        assert resolved.is_prerelease is True

    def test_auth_fallback_on_401(self) -> None:
        def latest(token):
            if token:
                return unauthorized(LATEST)
            return {"tag_name": "v2.3.1"}

        http = FakeHttpClient({REPO: {}, LATEST: latest})
        resolved = _resolver(http, token="bad").resolve(VersionSelector.parse(None))

        assert resolved.tag == "v2.3.1"
        latest_calls = [(url, token) for _, url, token in http.calls if url == LATEST]
        assert latest_calls == [(LATEST, "bad"), (LATEST, None)]

    def test_both_attempts_fail(self) -> None:
        http = FakeHttpClient({REPO: {}, LATEST: unauthorized(LATEST)})
        with pytest.raises(ResolutionError) as exc_info:
            _resolver(http, token="t").resolve(VersionSelector.parse("latest"))
        assert any("--version" in hint for hint in exc_info.value.hints)

    def test_private_repo_hint(self) -> None:
        http = FakeHttpClient({LATEST: unauthorized(LATEST)})
        with pytest.raises(ResolutionError) as exc_info:
            _resolver(http).resolve(VersionSelector.parse("latest"))
        assert any("credential" in hint.lower() for hint in exc_info.value.hints)

    def test_null_tag_is_failure(self) -> None:
        http = FakeHttpClient({REPO: {}, LATEST: {"tag_name": "null"}})
        with pytest.raises(ResolutionError, match="no usable release tag"):
            _resolver(http).resolve(VersionSelector.parse("latest"))

    def test_empty_listing_is_failure(self) -> None:
        http = FakeHttpClient({REPO: {}, RELEASES: []})
        with pytest.raises(ResolutionError):
            _resolver(http).resolve(VersionSelector(SelectorKind.LATEST_INCLUDING_PRERELEASE))


class TestClassifyRepository:
    def test_public(self) -> None:
        http = FakeHttpClient({REPO: {"private": False}})
        assert _resolver(http).classify_repository() == RepoVisibility.PUBLIC

    def test_private_when_only_authenticated_read_works(self) -> None:
        http = FakeHttpClient({REPO: lambda token: {} if token else unauthorized(REPO)})
        assert _resolver(http, token="t").classify_repository() == RepoVisibility.PRIVATE

    def test_unknown_without_credentials(self) -> None:
        http = FakeHttpClient()
        assert _resolver(http).classify_repository() == RepoVisibility.UNKNOWN
