"""Minimal OCI distribution client for pulling Spin application artifacts."""

from __future__ import annotations

import base64
import hashlib
import json
import os
import re
from http.client import HTTPException
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from ..config import RegistryCredentials
from ..errors import RegistryError
from ..logging import get_logger
from .reference import Reference

MANIFEST_MEDIA_TYPES = (
    "application/vnd.oci.image.manifest.v1+json",
    "application/vnd.docker.distribution.manifest.v2+json",
)

_CHALLENGE_PARAM_RE = re.compile(r'(\w+)="([^"]*)"')

logger = get_logger("oci.client")


class RegistryClient:
    """Fetches manifests and blobs, caching blobs by digest on disk."""

    def __init__(
        self,
        cache_dir: Path,
        *,
        insecure: bool = False,
        credentials: RegistryCredentials | None = None,
        request_timeout: float = 30.0,
    ) -> None:
        self.cache_root = Path(cache_dir).expanduser() / "registry"
        self.insecure = insecure
        self.credentials = credentials or RegistryCredentials()
        self.request_timeout = request_timeout
        self._tokens: Dict[str, str] = {}
        for kind in ("wasm", "data"):
            (self.cache_root / kind).mkdir(parents=True, exist_ok=True)

    def fetch_manifest(self, reference: Reference) -> Dict[str, Any]:
        """Return the image manifest for ``reference`` as a mapping."""
        url = self._url(reference, f"manifests/{reference.target}")
        raw = self._get(reference, url, accept=", ".join(MANIFEST_MEDIA_TYPES))
        try:
            manifest = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise RegistryError(f"Registry returned an invalid manifest for {reference}", url=url) from exc
        if not isinstance(manifest, dict):
            raise RegistryError(f"Registry returned an invalid manifest for {reference}", url=url)
        return manifest

    def fetch_blob(self, reference: Reference, digest: str) -> bytes:
        """Download a blob and verify it against its digest."""
        url = self._url(reference, f"blobs/{digest}")
        data = self._get(reference, url)
        verify_digest(data, digest)
        return data

    def pull_blob(self, reference: Reference, digest: str, kind: str) -> Path:
        """Ensure the blob is present in the ``kind`` cache and return its path."""
        path = self.blob_path(digest, kind)
        if path.is_file():
            try:
                verify_digest(path.read_bytes(), digest)
            except RegistryError:
                logger.warning("Discarding corrupt cached %s blob %s", kind, digest)
                path.unlink()
            else:
                logger.debug("Reusing cached %s blob %s", kind, digest)
                return path
        data = self.fetch_blob(reference, digest)
        staging = path.with_name(f"{path.name}.partial")
        try:
            staging.write_bytes(data)
            os.replace(staging, path)
        except OSError:
            staging.unlink(missing_ok=True)
            raise
        logger.debug("Cached %s blob %s (%d bytes)", kind, digest, len(data))
        return path

    def blob_path(self, digest: str, kind: str) -> Path:
        return self.cache_root / kind / digest.replace(":", "_")

    def _url(self, reference: Reference, suffix: str) -> str:
        scheme = "http" if self.insecure else "https"
        return f"{scheme}://{reference.api_host}/v2/{reference.repository}/{suffix}"

    def _get(self, reference: Reference, url: str, *, accept: str | None = None) -> bytes:
        headers: Dict[str, str] = {}
        if accept:
            headers["Accept"] = accept
        token = self._tokens.get(reference.api_host)
        if token:
            headers["Authorization"] = token
        try:
            return self._open(url, headers)
        except HTTPError as exc:
            if exc.code != 401:
                raise _http_error(exc, url) from exc
            challenge = exc.headers.get("WWW-Authenticate", "") if exc.headers else ""
            authorization = self._authorize(reference, challenge)
            if authorization is None:
                raise _http_error(exc, url) from exc
        headers["Authorization"] = authorization
        try:
            return self._open(url, headers)
        except HTTPError as exc:
            raise _http_error(exc, url) from exc

    def _open(self, url: str, headers: Dict[str, str]) -> bytes:
        logger.debug("GET %s", url)
        try:
            request = Request(url, headers=headers, method="GET")
            with urlopen(request, timeout=self.request_timeout) as response:  # type: ignore[arg-type]
                return response.read()
        except HTTPError:
            raise
        except URLError as exc:
            raise RegistryError(f"Registry request to {url} failed: {exc.reason}", url=url) from exc
        except (HTTPException, OSError, ValueError) as exc:
            raise RegistryError(f"Registry request to {url} failed: {exc!r}", url=url) from exc

    def _authorize(self, reference: Reference, challenge: str) -> Optional[str]:
        scheme, _, params_text = challenge.partition(" ")
        scheme = scheme.lower()
        if scheme == "basic":
            if not self.credentials.is_set():
                return None
            authorization = f"Basic {self._basic_token()}"
        elif scheme == "bearer":
            params = dict(_CHALLENGE_PARAM_RE.findall(params_text))
            realm = params.pop("realm", None)
            if not realm:
                return None
            params.setdefault("scope", f"repository:{reference.repository}:pull")
            authorization = f"Bearer {self._fetch_token(realm, params)}"
        else:
            return None
        self._tokens[reference.api_host] = authorization
        return authorization

    def _fetch_token(self, realm: str, params: Dict[str, str]) -> str:
        url = f"{realm}?{urlencode(params)}"
        headers: Dict[str, str] = {}
        if self.credentials.is_set():
            headers["Authorization"] = f"Basic {self._basic_token()}"
        try:
            raw = self._open(url, headers)
        except HTTPError as exc:
            raise _http_error(exc, url) from exc
        try:
            payload = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise RegistryError("Token service returned invalid JSON", url=url) from exc
        token = None
        if isinstance(payload, dict):
            token = payload.get("token") or payload.get("access_token")
        if not isinstance(token, str) or not token:
            raise RegistryError("Token service did not return a token", url=url)
        return token

    def _basic_token(self) -> str:
        raw = f"{self.credentials.username}:{self.credentials.password}".encode("utf-8")
        return base64.b64encode(raw).decode("ascii")


def verify_digest(data: bytes, digest: str) -> None:
    """Raise when ``data`` does not hash to ``digest`` (``algorithm:hex``)."""
    algorithm, _, expected = digest.partition(":")
    try:
        hasher = hashlib.new(algorithm)
    except ValueError as exc:
        raise RegistryError(f"Unsupported digest algorithm '{algorithm}'") from exc
    hasher.update(data)
    if hasher.hexdigest() != expected.lower():
        raise RegistryError(f"Content does not match digest {digest}")


def _http_error(exc: HTTPError, url: str) -> RegistryError:
    if exc.code == 404:
        message = f"Not found: {url}"
    elif exc.code in (401, 403):
        message = f"Access denied ({exc.code}) for {url}"
    else:
        message = f"Registry request to {url} failed with status {exc.code}: {exc.reason}"
    return RegistryError(message, status=exc.code, url=url)


__all__ = ["MANIFEST_MEDIA_TYPES", "RegistryClient", "verify_digest"]
