"""CLI runner orchestration.

This module handles command dispatch, error reporting and exit codes for the
flowspace-install CLI.
"""

from __future__ import annotations

import signal
import sys
import traceback
from argparse import Namespace
from importlib.metadata import PackageNotFoundError, version
from typing import Any, Dict, Iterable, Optional

from flowspace_installer.cli.arguments import build_parser
from flowspace_installer.cli.commands.install import InstallCommand
from flowspace_installer.cli.commands.status import StatusCommand
from flowspace_installer.cli.exit_codes import (
    EXIT_INTERRUPTED,
    EXIT_INVALID_USAGE,
    EXIT_SUCCESS,
    EXIT_UNEXPECTED,
    exit_code_for,
)
from flowspace_installer.config.loader import ConfigError, load_config
from flowspace_installer.core.errors import ErrorCategory, InstallerError
from flowspace_installer.core.logging import configure_logging, get_logger

LOGGER = get_logger(__name__)

CATEGORY_HEADINGS: Dict[ErrorCategory, str] = {
    ErrorCategory.ENVIRONMENT: "Environment check failed",
    ErrorCategory.RESOLUTION: "Could not resolve a version",
    ErrorCategory.TRANSFER: "Download failed",
    ErrorCategory.INTEGRITY: "Integrity check failed",
    ErrorCategory.EXTRACTION: "Extraction failed",
    ErrorCategory.INSTALL: "Install failed",
}


def get_version() -> str:
    """Get the installer version.

    Returns:
        Version string from package metadata or fallback.
    """
    try:
        return version("flowspace-installer")
    except PackageNotFoundError:
        # Fallback for editable installs that have not yet built metadata.
        from flowspace_installer import __version__
        return __version__


def args_to_overrides(args: Namespace) -> Dict[str, Any]:
    """Convert CLI arguments to a config override dict.

    Only flags given on the command line are included.
    """
    overrides: Dict[str, Any] = {
        "version": args.version,
        "install_dir": args.install_dir,
        "base_url": args.base_url,
        "force": args.force,
        "use_credentials": args.use_credentials,
        "pre_release": args.pre_release,
        "skip_preflight": args.skip_preflight,
    }
    return {k: v for k, v in overrides.items() if v is not None}


def _raise_interrupt(signum, frame) -> None:
    raise KeyboardInterrupt


class CLIRunner:
    """Orchestrates CLI execution."""

    def __init__(self, install_cmd: Optional[InstallCommand] = None) -> None:
        self.parser = build_parser()
        self._version = get_version()
        self.install_cmd = install_cmd or InstallCommand()
        self.status_cmd = StatusCommand(version=self._version)

    def run(self, argv: Optional[Iterable[str]] = None) -> int:
        """Run the CLI.

        Args:
            argv: Command-line arguments (defaults to sys.argv).

        Returns:
            Exit code.
        """
        argv_list = list(argv) if argv is not None else sys.argv[1:]

        # Handle --help specially to return 0 without side effects
        if "--help" in argv_list or "-h" in argv_list:
            self.parser.print_help()
            return EXIT_SUCCESS

        args = self.parser.parse_args(argv_list)

        # Configure logging as early as possible
        configure_logging(
            debug=args.debug,
            verbose=args.verbose,
            quiet=args.quiet,
        )

        previous = self._trap_sigterm()
        try:
            config = load_config(
                cli_overrides=args_to_overrides(args),
                config_path=args.config,
            )
            command = self.status_cmd if args.status else self.install_cmd
            return command.execute(args, config)
        except ConfigError as e:
            print(f"Configuration error: {e}", file=sys.stderr)
            return EXIT_INVALID_USAGE
        except KeyboardInterrupt:
            print("\nInstallation interrupted.", file=sys.stderr)
            return EXIT_INTERRUPTED
        except InstallerError as e:
            self._report_error(e)
            return exit_code_for(e.category)
        except Exception as e:
            print(f"Unexpected error: {e}", file=sys.stderr)
            if args.debug:
                traceback.print_exc()
            return EXIT_UNEXPECTED
        finally:
            self._restore_sigterm(previous)

    def _report_error(self, error: InstallerError) -> None:
        heading = CATEGORY_HEADINGS.get(error.category, "Error")
        print(f"{heading}: {error}", file=sys.stderr)
        for hint in error.hints:
            print(f"  {hint}", file=sys.stderr)

    def _trap_sigterm(self) -> Any:
        """Treat SIGTERM like Ctrl-C for the duration of a command."""
        try:
            return signal.signal(signal.SIGTERM, _raise_interrupt)
        except ValueError:
            # Not on the main thread
            return None

    def _restore_sigterm(self, previous: Any) -> None:
        if previous is not None:
            signal.signal(signal.SIGTERM, previous)
