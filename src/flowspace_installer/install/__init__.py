"""
Local install steps.

This module handles:
- Install-state checks before any network access
- Pre-flight host checks
- Archive digest verification
- Extraction and atomic placement of the binary
"""

from flowspace_installer.install.installer import Installer
from flowspace_installer.install.integrity import compute_sha256, verify
from flowspace_installer.install.preflight import PreflightCheck, default_checks
from flowspace_installer.install.state import GuardDecision, InstallStateGuard

__all__ = [
    "GuardDecision",
    "Installer",
    "InstallStateGuard",
    "PreflightCheck",
    "compute_sha256",
    "default_checks",
    "verify",
]
