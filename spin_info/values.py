"""Typed access to the loosely-shaped values carried in locked manifests."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Mapping, Union

from .errors import MalformedManifestError

# JSON-native values are the closed set of shapes a manifest value can take.
Value = Union[None, bool, int, float, str, List["Value"], Dict[str, "Value"]]

_MISSING = object()


def require(mapping: Mapping[str, Any], key: str, context: str) -> Value:
    """Return ``mapping[key]`` or raise when the key is absent."""
    value = mapping.get(key, _MISSING)
    if value is _MISSING:
        raise MalformedManifestError(f"{context} is missing required field '{key}'")
    return value  # type: ignore[return-value]


def require_str(mapping: Mapping[str, Any], key: str, context: str) -> str:
    """Return a required string field, rejecting other value shapes."""
    value = require(mapping, key, context)
    if not isinstance(value, str):
        raise MalformedManifestError(
            f"{context} field '{key}' must be a string, found {describe_shape(value)}"
        )
    return value


def as_str_list(value: Value, context: str) -> List[str]:
    """Decode a sequence of strings without coercing other shapes."""
    if not isinstance(value, list):
        raise MalformedManifestError(
            f"{context} must be a list of strings, found {describe_shape(value)}"
        )
    items: List[str] = []
    for index, item in enumerate(value):
        if not isinstance(item, str):
            raise MalformedManifestError(
                f"{context}[{index}] must be a string, found {describe_shape(item)}"
            )
        items.append(item)
    return items


def describe_shape(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "sequence"
    if isinstance(value, dict):
        return "mapping"
    return type(value).__name__


def to_text(value: Any) -> str:
    """Render a value as compact JSON, keeping the stored key order."""
    return json.dumps(value, ensure_ascii=False)


def display(value: Any) -> str:
    """Render strings verbatim and every other shape as JSON text."""
    if isinstance(value, str):
        return value
    return to_text(value)


__all__ = [
    "Value",
    "as_str_list",
    "describe_shape",
    "display",
    "require",
    "require_str",
    "to_text",
]
