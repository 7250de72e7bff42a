"""Install command implementation."""

from __future__ import annotations

from argparse import Namespace
from typing import TYPE_CHECKING, Callable

from flowspace_installer.cli.commands import Command
from flowspace_installer.cli.exit_codes import EXIT_SUCCESS
from flowspace_installer.core.logging import get_logger
from flowspace_installer.core.models import DigestSource, InstallOutcome, InstallStatus
from flowspace_installer.pipeline.executor import InstallPipeline

if TYPE_CHECKING:
    from flowspace_installer.config.models import InstallerConfig

LOGGER = get_logger(__name__)

PipelineFactory = Callable[["InstallerConfig"], InstallPipeline]


class InstallCommand(Command):
    """Runs the install pipeline and reports the outcome.

    Installer errors propagate to the runner, which maps them to exit codes.
    """

    def __init__(self, pipeline_factory: PipelineFactory = InstallPipeline) -> None:
        self._pipeline_factory = pipeline_factory

    @property
    def name(self) -> str:
        return "install"

    def execute(self, args: Namespace, config: "InstallerConfig") -> int:
        outcome = self._pipeline_factory(config).run()
        self._report(outcome, config)
        return EXIT_SUCCESS

    def _report(self, outcome: InstallOutcome, config: "InstallerConfig") -> None:
        name = config.binary_name
        if outcome.status == InstallStatus.ALREADY_INSTALLED:
            print(f"{name} {outcome.version} is already installed at {outcome.binary_path}")
            print("Use --force to reinstall.")
        else:
            print(f"Installed {name} {outcome.version} to {outcome.binary_path}")
            if outcome.digest_source == DigestSource.NONE:
                print("Note: no checksum was published for this release; the download was not verified.")

        if not outcome.on_path:
            print()
            print(f"{outcome.binary_path.parent} is not in your PATH. Add it with:")
            print(f'  export PATH="{outcome.binary_path.parent}:$PATH"')
