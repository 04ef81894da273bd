"""Rendering of per-component capabilities, provenance and disk footprint."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Callable, List, Mapping, Tuple

from ..errors import MalformedManifestError
from ..models import LockedComponent
from ..sizes import Stat, TreeSize, file_size, file_uri_to_path, format_size, measure_tree
from ..values import describe_shape, display, require, to_text

# Absent grants are rendered with an explicit marker so the audit is complete.
CAPABILITY_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("allowed_outbound_hosts", "Allowed outbound hosts"),
    ("key_value_stores", "Key-value stores"),
    ("databases", "Databases"),
    ("ai_models", "AI models"),
)
NO_GRANTS = "[]"


class ComponentRenderer:
    """Renders one component block, measuring its artifacts on disk."""

    def __init__(
        self,
        *,
        measure: Callable[[Path], TreeSize] = measure_tree,
        stat: Stat = os.stat,
    ) -> None:
        self._measure = measure
        self._stat = stat

    def render(self, component: LockedComponent) -> List[str]:
        metadata = component.metadata
        context = f"Component '{component.id}'"
        lines = [f"Component: {component.id}"]

        if "description" in metadata:
            lines.append(f"  Description: {display(metadata['description'])}")

        for key, label in CAPABILITY_FIELDS:
            value = to_text(metadata[key]) if key in metadata else NO_GRANTS
            lines.append(f"  {label}: {value}")

        lines.extend(self._render_build(metadata, context))
        lines.append(self._render_source(component, context))
        lines.extend(self._render_env(component.env))
        lines.extend(self._render_files(component, context))
        return lines

    def _render_build(self, metadata: Mapping[str, Any], context: str) -> List[str]:
        if "build" not in metadata:
            return ["  Build command: none"]
        build = metadata["build"]
        if not isinstance(build, dict):
            raise MalformedManifestError(
                f"{context} metadata 'build' must be a mapping, found {describe_shape(build)}"
            )
        command = require(build, "command", f"{context} metadata 'build'")
        lines = [f"  Build command: {display(command)}"]
        if "workdir" in build:
            lines.append(f"  Build workdir: {display(build['workdir'])}")
        return lines

    def _render_source(self, component: LockedComponent, context: str) -> str:
        uri = component.source.content.source
        path = file_uri_to_path(uri, context)
        size = file_size(path, context, stat=self._stat)
        return f"  Source: {uri} ({format_size(size)})"

    @staticmethod
    def _render_env(env: Mapping[str, str]) -> List[str]:
        if not env:
            return []
        lines = ["  Environment:"]
        lines.extend(f"    {key}={value}" for key, value in env.items())
        return lines

    def _render_files(self, component: LockedComponent, context: str) -> List[str]:
        if not component.files:
            return []
        lines = ["  Files:"]
        for mount in component.files:
            root = file_uri_to_path(mount.content.source, f"{context} mount '{mount.path}'")
            tree = self._measure(root)
            noun = "file" if tree.files == 1 else "files"
            lines.append(
                f"    {mount.path}: {tree.files} {noun}, {format_size(tree.total_bytes)}"
            )
        return lines


__all__ = ["CAPABILITY_FIELDS", "ComponentRenderer", "NO_GRANTS"]
