"""Error taxonomy for the install pipeline.

Every fatal condition raised by a pipeline stage is an ``InstallerError``
subclass tagged with an ``ErrorCategory``. The CLI maps categories to exit
codes; nothing below the CLI decides how the process terminates.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional


class ErrorCategory(str, Enum):
    """Category of a fatal installer failure."""

    ENVIRONMENT = "environment"
    RESOLUTION = "resolution"
    TRANSFER = "transfer"
    INTEGRITY = "integrity"
    EXTRACTION = "extraction"
    INSTALL = "install"


class InstallerError(Exception):
    """Base class for fatal installer errors.

    Attributes:
        hints: Follow-up lines shown to the user after the main message.
    """

    category: ErrorCategory = ErrorCategory.INSTALL

    def __init__(self, message: str, *, hints: Optional[List[str]] = None) -> None:
        super().__init__(message)
        self.hints: List[str] = list(hints or [])


class EnvironmentCheckError(InstallerError):
    """The host cannot run the installer (tooling, docker, permissions)."""

    category = ErrorCategory.ENVIRONMENT


class UnsupportedPlatformError(EnvironmentCheckError):
    """The host OS or CPU architecture has no published artifact."""


class ResolutionError(InstallerError):
    """No concrete version tag could be determined."""

    category = ErrorCategory.RESOLUTION


class TransferError(InstallerError):
    """Downloading or copying the artifact failed or produced an empty file."""

    category = ErrorCategory.TRANSFER


class IntegrityError(InstallerError):
    """Downloaded artifact digest does not match the published digest.

    Attributes:
        expected: Expected SHA-256 hex digest.
        actual: Computed SHA-256 hex digest.
    """

    category = ErrorCategory.INTEGRITY

    def __init__(
        self,
        message: str,
        *,
        expected: Optional[str] = None,
        actual: Optional[str] = None,
        hints: Optional[List[str]] = None,
    ) -> None:
        super().__init__(message, hints=hints)
        self.expected = expected
        self.actual = actual


class ExtractionError(InstallerError):
    """The archive is unreadable or does not contain the expected binary."""

    category = ErrorCategory.EXTRACTION


class InstallError(InstallerError):
    """The binary could not be written to the install directory."""

    category = ErrorCategory.INSTALL
