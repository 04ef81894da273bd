"""Locked application models shared across spin-info components."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import MalformedManifestError


class _Locked(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class ContentRef(_Locked):
    """Where a piece of content lives: a URI, inline bytes or a registry digest."""

    source: Optional[str] = None
    inline: Optional[str] = None
    digest: Optional[str] = None


class ContentPath(_Locked):
    """Content mounted into a component at ``path``."""

    content: ContentRef = Field(default_factory=ContentRef)
    path: str


class LockedComponentSource(_Locked):
    content_type: str = "application/wasm"
    content: ContentRef = Field(default_factory=ContentRef)


class LockedComponent(_Locked):
    """One deployable unit: a wasm binary plus its files and environment."""

    id: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
    source: LockedComponentSource = Field(default_factory=LockedComponentSource)
    env: Dict[str, str] = Field(default_factory=dict)
    files: List[ContentPath] = Field(default_factory=list)
    config: Dict[str, str] = Field(default_factory=dict)


class LockedTrigger(_Locked):
    id: str
    trigger_type: str
    trigger_config: Any = None


class Variable(_Locked):
    """A declared application variable."""

    description: Optional[str] = None
    default: Optional[str] = None
    secret: bool = False


class LockedApp(_Locked):
    """The fully resolved description of an application."""

    spin_lock_version: Optional[int] = None
    must_understand: List[str] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)
    host_requirements: Dict[str, Any] = Field(default_factory=dict)
    variables: Dict[str, Variable] = Field(default_factory=dict)
    triggers: List[LockedTrigger] = Field(default_factory=list)
    components: List[LockedComponent] = Field(default_factory=list)


def parse_locked_app(data: Union[bytes, str, Dict[str, Any]]) -> LockedApp:
    """Decode a locked application from JSON text or an already-parsed mapping."""
    if isinstance(data, (bytes, str)):
        try:
            data = json.loads(data)
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise MalformedManifestError(f"Locked application is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise MalformedManifestError("Locked application must be a JSON object")
    try:
        return LockedApp.model_validate(data)
    except ValidationError as exc:
        raise MalformedManifestError(f"Locked application failed validation: {exc}") from exc


__all__ = [
    "ContentPath",
    "ContentRef",
    "LockedApp",
    "LockedComponent",
    "LockedComponentSource",
    "LockedTrigger",
    "Variable",
    "parse_locked_app",
]
