"""Argument parser construction for the flowspace-install CLI.

The installer has a single, flat command line:
- flowspace-install            - install or update the binary
- flowspace-install --status   - show what is installed, without network access
"""

from __future__ import annotations

import argparse
from pathlib import Path


def _add_logging_options(parser: argparse.ArgumentParser) -> None:
    """Add logging verbosity options."""
    group = parser.add_argument_group("logging")
    group.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging.",
    )
    group.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose (info-level) logging.",
    )
    group.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Reduce logging output to errors only.",
    )


def _add_install_options(parser: argparse.ArgumentParser) -> None:
    """Add options controlling what is installed and where."""
    group = parser.add_argument_group("install")
    group.add_argument(
        "--version", "-v",
        metavar="TAG",
        default=None,
        help="Release tag to install (default: latest).",
    )
    group.add_argument(
        "--install-dir", "--dir", "-d",
        dest="install_dir",
        metavar="DIR",
        default=None,
        help="Install directory (default: ~/.local/bin).",
    )
    group.add_argument(
        "--base-url",
        metavar="URL",
        default=None,
        help="Fetch archives and checksums from this base URL (http(s):// or file://).",
    )
    group.add_argument(
        "--pre-release",
        action="store_true",
        default=None,
        help="Consider pre-releases when resolving the latest version.",
    )
    group.add_argument(
        "--force", "-f",
        action="store_true",
        default=None,
        help="Reinstall even if the binary is already installed.",
    )


def _add_environment_options(parser: argparse.ArgumentParser) -> None:
    """Add options controlling credentials, config and checks."""
    group = parser.add_argument_group("environment")
    group.add_argument(
        "--no-gcm",
        dest="use_credentials",
        action="store_false",
        default=None,
        help="Do not look up credentials with the git credential helper.",
    )
    group.add_argument(
        "--config",
        metavar="PATH",
        type=Path,
        default=None,
        help="Path to an installer config file (default: ~/.config/flowspace/installer.yml).",
    )
    group.add_argument(
        "--skip-preflight",
        action="store_true",
        default=None,
        help="Skip the Docker and permission pre-flight checks.",
    )
    group.add_argument(
        "--status",
        action="store_true",
        help="Show the installed binary's status and exit.",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for flowspace-install.

    Flags that also exist as config keys default to None so that only
    explicitly given flags override the config file and environment.

    Returns:
        Configured ArgumentParser.
    """
    parser = argparse.ArgumentParser(
        prog="flowspace-install",
        description="Install the flowspace binary from its GitHub releases.",
        epilog=(
            "Environment: FLOWSPACE_VERSION, FLOWSPACE_INSTALL_DIR, FLOWSPACE_BASE_URL, "
            "FLOWSPACE_FORCE, FLOWSPACE_USE_GCM_AUTH, FLOWSPACE_PRE_RELEASE, "
            "FLOWSPACE_SKIP_PREFLIGHT, FLOWSPACE_CONFIG. Command-line flags take precedence."
        ),
    )
    _add_install_options(parser)
    _add_environment_options(parser)
    _add_logging_options(parser)
    return parser
