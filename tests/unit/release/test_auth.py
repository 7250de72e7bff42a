"""Tests for the authenticated-then-anonymous request policy."""

from __future__ import annotations

from typing import List, Optional

import pytest

from flowspace_installer.release.auth import host_of, with_auth_fallback
from flowspace_installer.release.http import TransportError


class TestWithAuthFallback:
    def test_authenticated_success(self) -> None:
        seen: List[Optional[str]] = []

        def request(token: Optional[str]) -> str:
            seen.append(token)
            return "ok"

        assert with_auth_fallback(request, "t", "lookup") == "ok"
        assert seen == ["t"]

    def test_falls_back_once(self) -> None:
        seen: List[Optional[str]] = []

        def request(token: Optional[str]) -> str:
            seen.append(token)
            if token:
                raise TransportError("HTTP 401", url="u", status=401)
            return "anon"

        assert with_auth_fallback(request, "t", "lookup") == "anon"
        assert seen == ["t", None]

    def test_both_fail(self) -> None:
        calls: List[Optional[str]] = []

        def request(token: Optional[str]) -> str:
            calls.append(token)
            raise TransportError("HTTP 404", url="u", status=404)

        with pytest.raises(TransportError):
            with_auth_fallback(request, "t", "lookup")
        assert calls == ["t", None]

    def test_no_token_goes_straight_to_anonymous(self) -> None:
        seen: List[Optional[str]] = []

        def request(token: Optional[str]) -> str:
            seen.append(token)
            return "anon"

        with_auth_fallback(request, None, "lookup")
        assert seen == [None]

    def test_other_errors_are_not_caught(self) -> None:
        def request(token: Optional[str]) -> str:
            raise RuntimeError("bug")

        with pytest.raises(RuntimeError):
            with_auth_fallback(request, "t", "lookup")


class TestHostOf:
    def test_lowercases(self) -> None:
        assert host_of("https://GitHub.com/org/repo") == "github.com"

    def test_no_host(self) -> None:
        assert host_of("file:///tmp/x") == ""
