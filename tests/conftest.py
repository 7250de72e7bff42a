"""Shared fixtures for installer tests."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, Optional

import pytest

from helpers import BINARY_CONTENT, FakeHttpClient, build_tarball, build_zip, sha256_of


@pytest.fixture
def fake_http() -> FakeHttpClient:
    return FakeHttpClient()


@pytest.fixture
def release_dir(tmp_path: Path) -> Callable[..., Path]:
    """Factory creating a local release directory with an archive and manifest.

    Returns a callable ``make(archive_name, members, checksum=True|str|None)``.
    ``checksum=True`` writes the archive's real digest, a string writes that
    digest, and None writes no manifest.
    """

    def make(
        archive_name: str = "tool-v2.3.1-linux-amd64.tar.gz",
        members: Optional[Dict[str, bytes]] = None,
        checksum: Any = True,
    ) -> Path:
        root = tmp_path / "releases"
        root.mkdir(exist_ok=True)
        if members is None:
            members = {"tool-linux-amd64": BINARY_CONTENT}
        archive = root / archive_name
        if archive_name.endswith(".zip"):
            build_zip(archive, members)
        else:
            build_tarball(archive, members)
        if checksum is not None:
            digest = sha256_of(archive.read_bytes()) if checksum is True else checksum
            (root / "checksums.txt").write_text(f"{digest}  {archive_name}\n")
        return root

    return make
