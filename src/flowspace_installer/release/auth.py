"""Authenticated-then-anonymous request policy."""

from __future__ import annotations

from typing import Callable, Optional, TypeVar
from urllib.parse import urlparse

from flowspace_installer.core.logging import get_logger
from flowspace_installer.release.http import TransportError

LOGGER = get_logger(__name__)

T = TypeVar("T")


def with_auth_fallback(
    request: Callable[[Optional[str]], T],
    token: Optional[str],
    description: str,
) -> T:
    """Run ``request`` with ``token``, retrying once anonymously on failure.

    This is a one-shot degrade, not a retry loop: at most two calls are made.

    Args:
        request: Callable taking a token (or None) and performing one request.
        token: Bearer token, or None to go straight to the anonymous call.
        description: Short label for log messages.

    Returns:
        Whatever ``request`` returns.

    Raises:
        TransportError: If the final attempt fails.
    """
    if token:
        try:
            return request(token)
        except TransportError as e:
            LOGGER.warning(f"Authenticated {description} failed ({e}), trying unauthenticated")
    return request(None)


def host_of(url: str) -> str:
    """Lower-cased host part of ``url``."""
    return (urlparse(url).hostname or "").lower()
