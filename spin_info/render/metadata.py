"""Rendering of application-level metadata, triggers, variables and requirements."""

from __future__ import annotations

from typing import Any, List, Mapping

from ..errors import MalformedManifestError
from ..models import LockedTrigger, Variable
from ..values import as_str_list, describe_shape, display, require_str, to_text

_IDENTITY_KEYS = ("name", "version", "authors", "description")
_CONTEXT = "Application metadata"


def render_metadata(metadata: Mapping[str, Any]) -> List[str]:
    """Render the application identity followed by its optional metadata.

    ``name`` and ``version`` are required; every other key is optional and
    rendered in manifest order after authors and description.
    """
    name = require_str(metadata, "name", _CONTEXT)
    version = require_str(metadata, "version", _CONTEXT)
    lines = [f"Application: {name}@{version}"]

    if "authors" in metadata:
        authors = as_str_list(metadata["authors"], f"{_CONTEXT} field 'authors'")
        lines.extend(f"  Author: {author}" for author in authors)

    if "description" in metadata:
        description = metadata["description"]
        if not isinstance(description, str):
            raise MalformedManifestError(
                f"{_CONTEXT} field 'description' must be a string, "
                f"found {describe_shape(description)}"
            )
        lines.append(f"  Description: {description}")

    for key, value in metadata.items():
        if key in _IDENTITY_KEYS:
            continue
        lines.append(f"  {key}: {display(value)}")
    return lines


def render_trigger(trigger: LockedTrigger) -> str:
    # Trigger configs have per-type schemas; render them without interpretation.
    return f"Trigger: {trigger.trigger_type} (id: {trigger.id}) {to_text(trigger.trigger_config)}"


def render_variables(variables: Mapping[str, Variable]) -> List[str]:
    if not variables:
        return []
    lines = ["Variables:"]
    for name, variable in variables.items():
        lines.append(f"  {name}: {variable!r}")
    return lines


def render_host_requirements(requirements: Mapping[str, Any]) -> List[str]:
    if not requirements:
        return []
    return [f"Host requirements: {to_text(dict(requirements))}"]


__all__ = [
    "render_host_requirements",
    "render_metadata",
    "render_trigger",
    "render_variables",
]
