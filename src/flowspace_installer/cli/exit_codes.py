"""Process exit codes for flowspace-install."""

from __future__ import annotations

from typing import Dict

from flowspace_installer.core.errors import ErrorCategory

EXIT_SUCCESS = 0
EXIT_UNEXPECTED = 1
EXIT_INVALID_USAGE = 2
EXIT_ENVIRONMENT = 3
EXIT_RESOLUTION = 4
EXIT_TRANSFER = 5
EXIT_INTEGRITY = 6
EXIT_EXTRACTION = 7
EXIT_INSTALL = 8
# 128 + SIGINT
EXIT_INTERRUPTED = 130

CATEGORY_EXIT_CODES: Dict[ErrorCategory, int] = {
    ErrorCategory.ENVIRONMENT: EXIT_ENVIRONMENT,
    ErrorCategory.RESOLUTION: EXIT_RESOLUTION,
    ErrorCategory.TRANSFER: EXIT_TRANSFER,
    ErrorCategory.INTEGRITY: EXIT_INTEGRITY,
    ErrorCategory.EXTRACTION: EXIT_EXTRACTION,
    ErrorCategory.INSTALL: EXIT_INSTALL,
}


def exit_code_for(category: ErrorCategory) -> int:
    return CATEGORY_EXIT_CODES.get(category, EXIT_UNEXPECTED)
