"""Tests for platform detection functionality."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from flowspace_installer.bootstrap.platform import (
    SUPPORTED_ARCH,
    SUPPORTED_OS,
    PlatformTarget,
    detect_arch,
    detect_os,
    get_platform_target,
    normalize_arch,
)
from flowspace_installer.core.errors import UnsupportedPlatformError


class TestDetectOS:
    """Tests for OS detection."""

    def test_detect_os_darwin(self) -> None:
        with patch("platform.system", return_value="Darwin"):
            assert detect_os() == "darwin"

    def test_detect_os_linux(self) -> None:
        with patch("platform.system", return_value="Linux"):
            assert detect_os() == "linux"

    def test_detect_os_windows(self) -> None:
        with patch("platform.system", return_value="Windows"):
            assert detect_os() == "windows"

    def test_detect_os_unknown_raises(self) -> None:
        with patch("platform.system", return_value="UnknownOS"):
            with pytest.raises(UnsupportedPlatformError, match="Unsupported operating system"):
                detect_os()

    @pytest.mark.parametrize("system", ["CYGWIN_NT-10.0", "MINGW64_NT-10.0", "MSYS_NT-10.0"])
    def test_windows_kernel_under_posix_layer_fails_fast(self, system: str) -> None:
        with patch("platform.system", return_value=system):
            with pytest.raises(UnsupportedPlatformError) as exc_info:
                detect_os()
        assert exc_info.value.hints


class TestDetectArch:
    """Tests for architecture detection."""

    def test_detect_arch_x86_64(self) -> None:
        with patch("platform.machine", return_value="x86_64"):
            assert detect_arch("linux") == "amd64"

    def test_detect_arch_amd64(self) -> None:
        with patch("platform.machine", return_value="AMD64"):
            assert detect_arch("windows") == "amd64"

    def test_detect_arch_aarch64(self) -> None:
        with patch("platform.machine", return_value="aarch64"):
            assert detect_arch("linux") == "arm64"

    def test_detect_arch_x86_on_windows(self) -> None:
        with patch("platform.machine", return_value="x86"):
            assert detect_arch("windows") == "386"

    def test_detect_arch_x86_on_linux_raises(self) -> None:
        with patch("platform.machine", return_value="i686"):
            with pytest.raises(UnsupportedPlatformError, match="Unsupported architecture"):
                detect_arch("linux")

    def test_detect_arch_unknown_raises(self) -> None:
        with patch("platform.machine", return_value="mips"):
            with pytest.raises(UnsupportedPlatformError, match="Unsupported architecture"):
                detect_arch("linux")

    def test_detect_arch_empty_raises(self) -> None:
        with patch("platform.machine", return_value=""):
            with pytest.raises(UnsupportedPlatformError, match="unknown"):
                detect_arch("darwin")


class TestNormalizeArch:
    """Tests for architecture normalization."""

    def test_normalize_x86_64(self) -> None:
        assert normalize_arch("x86_64") == "amd64"

    def test_normalize_arm64(self) -> None:
        assert normalize_arch("arm64") == "arm64"

    def test_normalize_unknown(self) -> None:
        assert normalize_arch("riscv64") is None


class TestPlatformTarget:
    """Tests for PlatformTarget."""

    def test_slug(self) -> None:
        assert PlatformTarget(os="linux", arch="amd64").slug == "linux-amd64"

    @pytest.mark.parametrize("os_name", sorted(SUPPORTED_OS))
    @pytest.mark.parametrize("arch", sorted(SUPPORTED_ARCH))
    def test_supported_pairs(self, os_name: str, arch: str) -> None:
        target = PlatformTarget(os=os_name, arch=arch)
        assert target.is_supported()
        assert target.slug == f"{os_name}-{arch}"

    def test_386_only_on_windows(self) -> None:
        assert PlatformTarget(os="windows", arch="386").is_supported()
        assert not PlatformTarget(os="linux", arch="386").is_supported()

    def test_get_platform_target(self) -> None:
        with patch("platform.system", return_value="Linux"), \
             patch("platform.machine", return_value="x86_64"):
            assert get_platform_target() == PlatformTarget(os="linux", arch="amd64")
