"""Tests for the install-state guard."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from flowspace_installer.core.models import VersionSelector
from flowspace_installer.install.state import (
    REASON_ALREADY_INSTALLED,
    REASON_FORCED,
    REASON_MISSING,
    REASON_UNREADABLE,
    REASON_VERSION_MISMATCH,
    InstallStateGuard,
    parse_version_output,
    read_installed_version,
)

LATEST = VersionSelector.parse("latest")


def _completed(stdout: str, returncode: int = 0) -> MagicMock:
    result = MagicMock()
    result.stdout = stdout
    result.stderr = ""
    result.returncode = returncode
    return result


@pytest.fixture
def binary(tmp_path: Path) -> Path:
    path = tmp_path / "tool"
    path.write_bytes(b"binary")
    return path


class TestParseVersionOutput:
    def test_semver_token(self) -> None:
        assert parse_version_output("tool version v2.3.1 (abc123)\n") == "v2.3.1"

    def test_prerelease_suffix(self) -> None:
        assert parse_version_output("2.4.0-rc.1") == "2.4.0-rc.1"

    def test_first_line_fallback(self) -> None:
        assert parse_version_output("\n  dev-build\nmore") == "dev-build"

    def test_empty(self) -> None:
        assert parse_version_output("") is None


class TestReadInstalledVersion:
    def test_reads_version(self, binary: Path) -> None:
        with patch(
            "flowspace_installer.install.state.subprocess.run",
            return_value=_completed("tool 2.3.1\n"),
        ) as mock_run:
            assert read_installed_version(binary) == "2.3.1"
        assert mock_run.call_args[0][0] == [str(binary), "--version"]
        assert mock_run.call_args[1]["timeout"] == 10

    def test_nonzero_exit(self, binary: Path) -> None:
        with patch(
            "flowspace_installer.install.state.subprocess.run",
            return_value=_completed("", returncode=1),
        ):
            assert read_installed_version(binary) is None

    def test_not_executable(self, binary: Path) -> None:
        with patch(
            "flowspace_installer.install.state.subprocess.run",
            side_effect=PermissionError("denied"),
        ):
            assert read_installed_version(binary) is None

    def test_timeout(self, binary: Path) -> None:
        with patch(
            "flowspace_installer.install.state.subprocess.run",
            side_effect=subprocess.TimeoutExpired(cmd="tool", timeout=10),
        ):
            assert read_installed_version(binary) is None


class TestInstallStateGuard:
    def test_missing(self, tmp_path: Path) -> None:
        decision = InstallStateGuard().check(tmp_path / "tool", LATEST, force=False)
        assert decision.proceed
        assert decision.reason == REASON_MISSING

    def test_forced(self, binary: Path) -> None:
        with patch("flowspace_installer.install.state.subprocess.run") as mock_run:
            decision = InstallStateGuard().check(binary, LATEST, force=True)
        assert decision.proceed
        assert decision.reason == REASON_FORCED
        mock_run.assert_not_called()

    def test_already_installed(self, binary: Path) -> None:
        with patch(
            "flowspace_installer.install.state.subprocess.run",
            return_value=_completed("tool v2.3.1"),
        ):
            decision = InstallStateGuard().check(binary, LATEST, force=False)
        assert not decision.proceed
        assert decision.reason == REASON_ALREADY_INSTALLED
        assert decision.installed_version == "v2.3.1"

    def test_same_explicit_version_is_noop(self, binary: Path) -> None:
        with patch(
            "flowspace_installer.install.state.subprocess.run",
            return_value=_completed("2.3.1"),
        ):
            decision = InstallStateGuard().check(binary, VersionSelector.parse("v2.3.1"), force=False)
        assert not decision.proceed

    def test_different_explicit_version_proceeds(self, binary: Path) -> None:
        with patch(
            "flowspace_installer.install.state.subprocess.run",
            return_value=_completed("v2.3.1"),
        ):
            decision = InstallStateGuard().check(binary, VersionSelector.parse("v2.4.0"), force=False)
        assert decision.proceed
        assert decision.reason == REASON_VERSION_MISMATCH
        assert decision.installed_version == "v2.3.1"

    def test_unreadable_proceeds_with_warning(self, binary: Path, caplog) -> None:
        with patch(
            "flowspace_installer.install.state.subprocess.run",
            side_effect=OSError("exec format error"),
        ), caplog.at_level("WARNING"):
            decision = InstallStateGuard().check(binary, LATEST, force=False)
        assert decision.proceed
        assert decision.reason == REASON_UNREADABLE
        assert "Could not read the version" in caplog.text
