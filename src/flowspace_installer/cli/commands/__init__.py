"""CLI commands package.

This module provides the base Command class and exports all command implementations.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from argparse import Namespace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from flowspace_installer.config.models import InstallerConfig


class Command(ABC):
    """Base class for CLI commands.

    All CLI commands should inherit from this class and implement
    the execute method.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Command identifier."""

    @abstractmethod
    def execute(self, args: Namespace, config: "InstallerConfig") -> int:
        """Execute the command.

        Args:
            args: Parsed command-line arguments.
            config: Effective installer configuration.

        Returns:
            Exit code (0 for success, non-zero for error).
        """


# ruff: noqa: E402
from flowspace_installer.cli.commands.install import InstallCommand
from flowspace_installer.cli.commands.status import StatusCommand

__all__ = [
    "Command",
    "InstallCommand",
    "StatusCommand",
]
