"""SHA-256 verification of downloaded archives."""

from __future__ import annotations

import hashlib
import re
from pathlib import Path

from flowspace_installer.core.errors import IntegrityError
from flowspace_installer.core.logging import get_logger
from flowspace_installer.core.models import IntegrityRecord

LOGGER = get_logger(__name__)

CHUNK_SIZE = 64 * 1024

_SHA256_HEX = re.compile(r"^[0-9a-f]{64}$")


def compute_sha256(path: Path) -> str:
    """Compute the lowercase hex SHA-256 digest of a file."""
    sha256 = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
            sha256.update(chunk)
    return sha256.hexdigest()


def verify(path: Path, record: IntegrityRecord) -> bool:
    """Check ``path`` against the expected digest in ``record``.

    A record without a digest skips verification with a warning. A mismatch
    deletes the file before raising.

    Returns:
        True when the file is accepted.

    Raises:
        IntegrityError: If the published digest is malformed or does not match.
    """
    if not record.has_digest:
        LOGGER.warning(f"No checksum published for {path.name}, skipping verification")
        return True

    assert record.expected_digest is not None
    expected = record.expected_digest.strip().lower()
    if not _SHA256_HEX.match(expected):
        path.unlink(missing_ok=True)
        raise IntegrityError(
            f"Published checksum for {path.name} is not a SHA-256 digest",
            expected=expected,
            hints=[
                f"Published: {expected}",
                f"Digest source: {record.source.value}",
                "The checksum file may be truncated or corrupted; nothing was installed",
            ],
        )

    actual = compute_sha256(path)
    if actual == expected:
        LOGGER.info(f"Checksum verified ({record.source.value})")
        return True

    path.unlink(missing_ok=True)
    raise IntegrityError(
        f"Checksum mismatch for {path.name}",
        expected=expected,
        actual=actual,
        hints=[
            f"Expected: {expected}",
            f"Actual:   {actual}",
            "The download may be corrupted or tampered with; nothing was installed",
        ],
    )
