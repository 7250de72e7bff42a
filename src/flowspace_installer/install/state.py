"""Install-state guard.

Decides, before any network activity, whether an install needs to run.
"""

from __future__ import annotations

import re
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from flowspace_installer.core.logging import get_logger
from flowspace_installer.core.models import VersionSelector

LOGGER = get_logger(__name__)

VERSION_TIMEOUT = 10

_VERSION_PATTERN = re.compile(r"v?\d+\.\d+\.\d+[-\w.]*")

REASON_MISSING = "missing"
REASON_FORCED = "forced"
REASON_UNREADABLE = "unreadable"
REASON_VERSION_MISMATCH = "version-mismatch"
REASON_ALREADY_INSTALLED = "already-installed"


def parse_version_output(output: str) -> Optional[str]:
    """Pick the version out of ``<binary> --version`` output."""
    match = _VERSION_PATTERN.search(output)
    if match:
        return match.group(0)
    for line in output.splitlines():
        if line.strip():
            return line.strip()
    return None


def _same_version(installed: str, tag: str) -> bool:
    return installed.lstrip("v") == tag.strip().lstrip("v")


def read_installed_version(binary_path: Path) -> Optional[str]:
    """Run ``<binary> --version`` and return the reported version.

    Returns:
        The version string, or None if the binary could not report one.
    """
    try:
        result = subprocess.run(
            [str(binary_path), "--version"],
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=VERSION_TIMEOUT,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        LOGGER.debug(f"Could not run {binary_path}: {e}")
        return None
    if result.returncode != 0:
        LOGGER.debug(f"{binary_path} --version exited with {result.returncode}")
        return None
    return parse_version_output(result.stdout or result.stderr)


@dataclass(frozen=True)
class GuardDecision:
    """Outcome of the install-state check.

    Attributes:
        proceed: Whether the pipeline should run.
        reason: Why.
        installed_version: Version of the existing binary, when readable.
    """

    proceed: bool
    reason: str
    installed_version: Optional[str] = None


class InstallStateGuard:
    """Checks an existing install against the requested version."""

    def check(self, binary_path: Path, selector: VersionSelector, force: bool) -> GuardDecision:
        if force:
            return GuardDecision(True, REASON_FORCED)
        if not binary_path.is_file():
            return GuardDecision(True, REASON_MISSING)

        installed = read_installed_version(binary_path)
        if installed is None:
            LOGGER.warning(f"Could not read the version of {binary_path}, reinstalling")
            return GuardDecision(True, REASON_UNREADABLE)

        if selector.is_explicit and selector.tag and not _same_version(installed, selector.tag):
            LOGGER.info(f"Installed version {installed} differs from requested {selector.tag}")
            return GuardDecision(True, REASON_VERSION_MISMATCH, installed)

        return GuardDecision(False, REASON_ALREADY_INSTALLED, installed)
