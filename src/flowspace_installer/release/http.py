"""Secure HTTP utilities with SSL certificate handling.

All remote requests go through ``HttpClient``, which uses certifi's CA bundle
so that HTTPS works on hosts without an accessible system certificate store.
"""

from __future__ import annotations

import json
import shutil
import ssl
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import urlparse
from urllib.request import HTTPRedirectHandler, HTTPSHandler, OpenerDirector, Request, build_opener

import certifi

from flowspace_installer import __version__
from flowspace_installer.core.logging import get_logger

LOGGER = get_logger(__name__)

# Upper bound for metadata requests so an unreachable host fails fast
METADATA_TIMEOUT = 10.0

GITHUB_JSON = "application/vnd.github+json"
OCTET_STREAM = "application/octet-stream"


class TransportError(Exception):
    """A single HTTP request failed.

    Attributes:
        url: The URL that was requested.
        status: HTTP status code, if the server answered.
    """

    def __init__(self, message: str, *, url: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.url = url
        self.status = status


def get_ssl_context() -> ssl.SSLContext:
    """Get an SSL context that uses certifi's CA bundle.

    Returns:
        An SSL context configured with certifi's CA certificates.
    """
    return ssl.create_default_context(cafile=certifi.where())


class AuthStrippingRedirectHandler(HTTPRedirectHandler):
    """Follows redirects, dropping ``Authorization`` when the host changes.

    Release downloads redirect to a storage host that must never see the
    user's token.
    """

    def redirect_request(self, req, fp, code, msg, headers, newurl):
        new_request = super().redirect_request(req, fp, code, msg, headers, newurl)
        if new_request is None:
            return None
        if urlparse(req.full_url).hostname != urlparse(new_request.full_url).hostname:
            if new_request.has_header("Authorization"):
                LOGGER.debug(f"Dropping credentials on redirect to {urlparse(newurl).hostname}")
            new_request.remove_header("Authorization")
        return new_request


def build_headers(token: Optional[str] = None, accept: Optional[str] = None) -> Dict[str, str]:
    """Headers sent with every request."""
    headers = {"User-Agent": f"flowspace-installer/{__version__}"}
    if accept:
        headers["Accept"] = accept
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


class HttpClient:
    """Blocking HTTP(S) GET client."""

    def __init__(self, ssl_context: Optional[ssl.SSLContext] = None) -> None:
        self._ssl_context = ssl_context
        self._opener: Optional[OpenerDirector] = None

    @property
    def ssl_context(self) -> ssl.SSLContext:
        if self._ssl_context is None:
            self._ssl_context = get_ssl_context()
        return self._ssl_context

    @property
    def opener(self) -> OpenerDirector:
        if self._opener is None:
            self._opener = build_opener(
                HTTPSHandler(context=self.ssl_context),
                AuthStrippingRedirectHandler(),
            )
        return self._opener

    def _open(
        self,
        url: str,
        token: Optional[str],
        accept: Optional[str],
        timeout: Optional[float],
    ):
        if not url.startswith(("https://", "http://")):
            raise ValueError(f"Only HTTP(S) URLs are supported: {url}")

        request = Request(url, headers=build_headers(token, accept))
        kwargs: Dict[str, Any] = {}
        if timeout is not None:
            kwargs["timeout"] = timeout

        try:
            return self.opener.open(request, **kwargs)  # nosec B310
        except HTTPError as e:
            raise TransportError(f"HTTP {e.code} - {e.reason}", url=url, status=e.code) from e
        except URLError as e:
            raise TransportError(f"{e.reason}", url=url) from e
        except OSError as e:
            raise TransportError(str(e), url=url) from e

    def get_bytes(
        self,
        url: str,
        *,
        token: Optional[str] = None,
        accept: Optional[str] = None,
        timeout: Optional[float] = METADATA_TIMEOUT,
    ) -> bytes:
        """Fetch a small resource into memory.

        Raises:
            TransportError: If the request fails.
        """
        LOGGER.debug(f"GET {url} (authenticated={token is not None})")
        with self._open(url, token, accept, timeout) as response:
            try:
                return response.read()
            except OSError as e:
                raise TransportError(f"Read failed: {e}", url=url) from e

    def get_json(
        self,
        url: str,
        *,
        token: Optional[str] = None,
        timeout: Optional[float] = METADATA_TIMEOUT,
    ) -> Any:
        """Fetch and decode a JSON document.

        Raises:
            TransportError: If the request fails or the body is not JSON.
        """
        body = self.get_bytes(url, token=token, accept=GITHUB_JSON, timeout=timeout)
        try:
            return json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise TransportError(f"Invalid JSON response: {e}", url=url) from e

    def download(
        self,
        url: str,
        dest_path: Path,
        *,
        token: Optional[str] = None,
        accept: Optional[str] = None,
    ) -> int:
        """Stream a file to ``dest_path``.

        No timeout is applied beyond the transport default since artifact
        sizes are not known in advance.

        Returns:
            Number of bytes written.

        Raises:
            TransportError: If the request or the write fails.
        """
        LOGGER.debug(f"Downloading {url} (authenticated={token is not None})")
        with self._open(url, token, accept, None) as response:
            total_size = response.getheader("Content-Length")
            if total_size:
                LOGGER.info(f"Download size: {int(total_size) / 1024 / 1024:.1f} MB")
            try:
                with open(dest_path, "wb") as f:
                    shutil.copyfileobj(response, f)
            except OSError as e:
                raise TransportError(f"Download interrupted: {e}", url=url) from e
        return dest_path.stat().st_size
