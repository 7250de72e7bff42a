"""Credential lookup through the git credential helper.

The installer never stores credentials. When enabled, it asks
``git credential fill`` for the password/token stored for a host and uses it
as a bearer token. Every failure degrades to "no credential".
"""

from __future__ import annotations

import os
import subprocess
from typing import Dict, List, Optional

from flowspace_installer.core.logging import get_logger

LOGGER = get_logger(__name__)

CREDENTIAL_HELPER_TIMEOUT = 15


def parse_credential_output(output: str) -> Optional[str]:
    """Extract the ``password=`` value from ``git credential fill`` output."""
    for line in output.splitlines():
        if line.startswith("password="):
            token = line[len("password="):].strip()
            return token or None
    return None


class GitCredentialResolver:
    """Resolves bearer tokens for hosts via ``git credential fill``.

    Results, including misses, are memoised per host for the lifetime of the
    resolver so the helper runs at most once per host per install.
    """

    def __init__(self, enabled: bool = True, git_executable: str = "git") -> None:
        self.enabled = enabled
        self._git = git_executable
        self._cache: Dict[str, Optional[str]] = {}

    def _command(self) -> List[str]:
        return [self._git, "credential", "fill"]

    def resolve_token(self, host: str) -> Optional[str]:
        """Return the stored token for ``host`` or None.

        Args:
            host: Host name, e.g. ``github.com``.
        """
        if not self.enabled or not host:
            return None
        if host not in self._cache:
            self._cache[host] = self._lookup(host)
        return self._cache[host]

    def _lookup(self, host: str) -> Optional[str]:
        env = dict(os.environ)
        # Never block on an interactive prompt
        env["GIT_TERMINAL_PROMPT"] = "0"
        env["GCM_INTERACTIVE"] = "never"

        try:
            result = subprocess.run(
                self._command(),
                input=f"protocol=https\nhost={host}\n\n",
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=CREDENTIAL_HELPER_TIMEOUT,
                env=env,
            )
        except FileNotFoundError:
            LOGGER.debug("git not found; continuing without credentials")
            return None
        except (subprocess.TimeoutExpired, OSError) as e:
            LOGGER.debug(f"Credential helper failed for {host}: {e}")
            return None

        if result.returncode != 0:
            LOGGER.debug(f"No stored credential for {host}")
            return None

        token = parse_credential_output(result.stdout)
        if token:
            LOGGER.info(f"Using stored credential for {host}")
        return token
