"""Command-line interface for flowspace-install."""

from __future__ import annotations

from typing import Iterable, Optional

from flowspace_installer.cli.runner import CLIRunner


def main(argv: Optional[Iterable[str]] = None) -> int:
    """CLI entry point."""
    runner = CLIRunner()
    return runner.run(argv)


__all__ = ["main", "CLIRunner"]
