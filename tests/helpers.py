"""Test helpers: release archives built on disk and fake network collaborators."""

from __future__ import annotations

import hashlib
import io
import json
import tarfile
import zipfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from flowspace_installer.release.http import TransportError

BINARY_CONTENT = b"#!/bin/sh\necho 'tool 2.3.1'\n"


def sha256_of(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def build_tarball(path: Path, members: Dict[str, bytes]) -> Path:
    """Write a .tar.gz containing ``members`` (name -> content)."""
    with tarfile.open(path, "w:gz") as tar:
        for name, content in members.items():
            info = tarfile.TarInfo(name=name)
            info.size = len(content)
            info.mode = 0o755
            tar.addfile(info, io.BytesIO(content))
    return path


def build_zip(path: Path, members: Dict[str, bytes]) -> Path:
    """Write a .zip containing ``members`` (name -> content)."""
    with zipfile.ZipFile(path, "w") as zf:
        for name, content in members.items():
            zf.writestr(name, content)
    return path


class FakeHttpClient:
    """Stands in for HttpClient; every call is recorded.

    ``routes`` maps a URL to either a value (bytes, or JSON-able data for
    ``get_json``), an exception to raise, or a callable taking the token.
    """

    def __init__(self, routes: Optional[Dict[str, Any]] = None) -> None:
        self.routes: Dict[str, Any] = dict(routes or {})
        self.calls: List[Tuple[str, str, Optional[str]]] = []

    def _answer(self, method: str, url: str, token: Optional[str]) -> Any:
        self.calls.append((method, url, token))
        if url not in self.routes:
            raise TransportError("HTTP 404 - Not Found", url=url, status=404)
        answer = self.routes[url]
        if callable(answer):
            answer = answer(token)
        if isinstance(answer, Exception):
            raise answer
        return answer

    def get_json(self, url: str, *, token: Optional[str] = None, timeout: Optional[float] = None) -> Any:
        answer = self._answer("get_json", url, token)
        if isinstance(answer, bytes):
            return json.loads(answer.decode("utf-8"))
        return answer

    def get_bytes(
        self,
        url: str,
        *,
        token: Optional[str] = None,
        accept: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> bytes:
        answer = self._answer("get_bytes", url, token)
        if isinstance(answer, str):
            return answer.encode("utf-8")
        return answer

    def download(
        self,
        url: str,
        dest_path: Path,
        *,
        token: Optional[str] = None,
        accept: Optional[str] = None,
    ) -> int:
        answer = self._answer("download", url, token)
        dest_path.write_bytes(answer)
        return len(answer)

    def urls(self, method: Optional[str] = None) -> List[str]:
        return [url for m, url, _ in self.calls if method is None or m == method]


class FakeCredentials:
    """Credential resolver returning a fixed token."""

    def __init__(self, token: Optional[str] = None) -> None:
        self.token = token
        self.hosts: List[str] = []

    def resolve_token(self, host: str) -> Optional[str]:
        self.hosts.append(host)
        return self.token


def unauthorized(url: str) -> TransportError:
    return TransportError("HTTP 401 - Unauthorized", url=url, status=401)


