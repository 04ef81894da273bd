"""Loads Spin applications published as OCI artifacts."""

from __future__ import annotations

import asyncio
import base64
import binascii
import shutil
import tempfile
from pathlib import Path, PurePosixPath
from types import TracebackType
from typing import Any, Dict, List, Optional, Type

from ..errors import RegistryError
from ..loader import ManifestLoader
from ..logging import get_logger
from ..models import ContentPath, ContentRef, LockedApp, LockedComponent, parse_locked_app
from .client import RegistryClient
from .reference import InvalidReferenceError, Reference, parse_reference

SPIN_CONFIG_MEDIA_TYPE = "application/vnd.fermyon.spin.application.v1+config"
WASM_LAYER_MEDIA_TYPE = "application/vnd.wasm.content.layer.v1+wasm"
DATA_LAYER_MEDIA_TYPE = "application/vnd.wasm.content.layer.v1+data"

_LAYER_KINDS = {
    WASM_LAYER_MEDIA_TYPE: "wasm",
    DATA_LAYER_MEDIA_TYPE: "data",
}

logger = get_logger("oci.loader")


class OciLoader(ManifestLoader):
    """Pulls an application into the cache and stages its files locally.

    Component sources are rewritten to ``file://`` URIs of cached blobs and
    each component's files are copied under a temporary working directory
    that is removed when the loader context exits.
    """

    def __init__(self, client: RegistryClient) -> None:
        self.client = client
        self._working_dir: Optional[tempfile.TemporaryDirectory[str]] = None

    async def __aenter__(self) -> "OciLoader":
        self._working_dir = tempfile.TemporaryDirectory(prefix="spin-info-")
        logger.debug("Created working directory %s", self._working_dir.name)
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        if self._working_dir is not None:
            self._working_dir.cleanup()
            self._working_dir = None

    @property
    def working_dir(self) -> Path:
        if self._working_dir is None:
            raise RuntimeError("OciLoader must be used as an async context manager")
        return Path(self._working_dir.name)

    async def load(self, reference: str) -> LockedApp:
        working_dir = self.working_dir
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._load, reference, working_dir)

    def _load(self, text: str, working_dir: Path) -> LockedApp:
        try:
            reference = parse_reference(text)
        except InvalidReferenceError as exc:
            raise RegistryError(str(exc)) from exc

        manifest = self.client.fetch_manifest(reference)
        config = manifest.get("config")
        if not isinstance(config, dict) or not isinstance(config.get("digest"), str):
            raise RegistryError(f"Manifest for {text} has no config descriptor")
        media_type = config.get("mediaType")
        if media_type != SPIN_CONFIG_MEDIA_TYPE:
            raise RegistryError(
                f"{text} is not a Spin application (config media type {media_type!r})"
            )

        app = parse_locked_app(self.client.fetch_blob(reference, config["digest"]))
        self._pull_layers(reference, manifest.get("layers"))

        components = [
            self._resolve_component(component, working_dir) for component in app.components
        ]
        return app.model_copy(update={"components": components})

    def _pull_layers(self, reference: Reference, layers: Any) -> None:
        if not isinstance(layers, list):
            return
        for layer in layers:
            if not isinstance(layer, dict):
                continue
            kind = _LAYER_KINDS.get(str(layer.get("mediaType")))
            digest = layer.get("digest")
            if kind is None or not isinstance(digest, str):
                logger.debug("Skipping layer %r", layer.get("mediaType"))
                continue
            self.client.pull_blob(reference, digest, kind)

    def _resolve_component(self, component: LockedComponent, working_dir: Path) -> LockedComponent:
        update: Dict[str, Any] = {}

        digest = component.source.content.digest
        if digest:
            wasm_path = self.client.blob_path(digest, "wasm")
            if not wasm_path.is_file():
                raise RegistryError(
                    f"Component '{component.id}' references missing wasm layer {digest}"
                )
            update["source"] = component.source.model_copy(
                update={"content": ContentRef(source=wasm_path.resolve().as_uri())}
            )

        if component.files:
            if not _is_safe_to_join(component.id):
                raise RegistryError(f"Component id '{component.id}' is not a safe directory name")
            mount_dir = working_dir / "assets" / component.id
            mount_dir.mkdir(parents=True, exist_ok=True)
            for file in component.files:
                self._stage_file(component.id, file, mount_dir)
            staged: List[ContentPath] = [
                ContentPath(content=ContentRef(source=mount_dir.resolve().as_uri()), path="/")
            ]
            update["files"] = staged

        if not update:
            return component
        return component.model_copy(update=update)

    def _stage_file(self, component_id: str, file: ContentPath, mount_dir: Path) -> None:
        if not _is_safe_to_join(file.path):
            raise RegistryError(
                f"Component '{component_id}' file path '{file.path}' escapes its mount directory"
            )
        target = mount_dir / file.path
        target.parent.mkdir(parents=True, exist_ok=True)

        if file.content.digest:
            blob = self.client.blob_path(file.content.digest, "data")
            if not blob.is_file():
                raise RegistryError(
                    f"Component '{component_id}' file '{file.path}' references missing data layer "
                    f"{file.content.digest}"
                )
            shutil.copyfile(blob, target)
        elif file.content.inline is not None:
            try:
                target.write_bytes(base64.b64decode(file.content.inline, validate=True))
            except binascii.Error as exc:
                raise RegistryError(
                    f"Component '{component_id}' file '{file.path}' has invalid inline content"
                ) from exc
        else:
            raise RegistryError(f"Component '{component_id}' file '{file.path}' has no content")


def _is_safe_to_join(path: str) -> bool:
    pure = PurePosixPath(path)
    if not path or pure.is_absolute() or "\\" in path:
        return False
    return ".." not in pure.parts


__all__ = [
    "DATA_LAYER_MEDIA_TYPE",
    "OciLoader",
    "SPIN_CONFIG_MEDIA_TYPE",
    "WASM_LAYER_MEDIA_TYPE",
]
