"""Configuration validation for the installer config file.

Warns on unknown keys (with a suggestion for likely typos) and reports values
of the wrong type as errors.
"""

from __future__ import annotations

from dataclasses import dataclass
from difflib import get_close_matches
from enum import Enum
from typing import Any, Dict, List, Optional, Set

from flowspace_installer.core.logging import get_logger

LOGGER = get_logger(__name__)


class ValidationSeverity(Enum):
    """Severity level for validation issues."""

    ERROR = "error"  # Config cannot be used
    WARNING = "warning"  # Likely mistake but config usable


@dataclass
class ConfigValidationIssue:
    """A validation issue for configuration with severity."""

    message: str
    source: str
    severity: ValidationSeverity
    key: Optional[str] = None
    suggestion: Optional[str] = None


STRING_KEYS: Set[str] = {
    "repository",
    "binary_name",
    "version",
    "install_dir",
    "base_url",
    "api_url",
    "download_url",
}

BOOLEAN_KEYS: Set[str] = {
    "force",
    "use_credentials",
    "pre_release",
    "skip_preflight",
}

VALID_KEYS: Set[str] = STRING_KEYS | BOOLEAN_KEYS


def validate_config(data: Dict[str, Any], source: str) -> List[ConfigValidationIssue]:
    """Validate a configuration mapping.

    Does not raise; the caller decides what to do with errors.

    Args:
        data: Config dictionary to validate.
        source: Source file path for messages.

    Returns:
        List of validation issues.
    """
    issues: List[ConfigValidationIssue] = []

    for key, value in data.items():
        if key not in VALID_KEYS:
            issue = ConfigValidationIssue(
                message=f"Unknown key '{key}'",
                source=source,
                severity=ValidationSeverity.WARNING,
                key=key,
                suggestion=_suggest_key(str(key), VALID_KEYS),
            )
            issues.append(issue)
            _log_warning(issue)
            continue

        if value is None:
            continue

        if key in BOOLEAN_KEYS and not isinstance(value, bool):
            issues.append(ConfigValidationIssue(
                message=f"'{key}' must be a boolean",
                source=source,
                severity=ValidationSeverity.ERROR,
                key=key,
            ))
        elif key in STRING_KEYS and not isinstance(value, str):
            issues.append(ConfigValidationIssue(
                message=f"'{key}' must be a string",
                source=source,
                severity=ValidationSeverity.ERROR,
                key=key,
            ))

    return issues


def _suggest_key(invalid_key: str, valid_keys: Set[str]) -> Optional[str]:
    """Suggest a valid key for a potential typo."""
    matches = get_close_matches(invalid_key, list(valid_keys), n=1, cutoff=0.6)
    return matches[0] if matches else None


def _log_warning(issue: ConfigValidationIssue) -> None:
    msg = f"{issue.message} in {issue.source}"
    if issue.suggestion:
        msg += f" (did you mean '{issue.suggestion}'?)"
    LOGGER.warning(msg)
