"""Parsing of OCI registry references such as ``ghcr.io/user/app:v1``."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

DEFAULT_REGISTRY = "docker.io"
DEFAULT_TAG = "latest"

_DOMAIN_RE = re.compile(
    r"^(?:[a-zA-Z0-9](?:[a-zA-Z0-9-]*[a-zA-Z0-9])?)"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]*[a-zA-Z0-9])?)*"
    r"(?::[0-9]+)?$"
)
_COMPONENT_RE = re.compile(r"^[a-z0-9]+(?:(?:[._]|__|-+)[a-z0-9]+)*$")
_TAG_RE = re.compile(r"^[\w][\w.-]{0,127}$")
_DIGEST_RE = re.compile(r"^[A-Za-z][A-Za-z0-9]*(?:[-_+.][A-Za-z][A-Za-z0-9]*)*:[0-9a-fA-F]{32,}$")


class InvalidReferenceError(ValueError):
    """Raised when a string cannot be parsed as an OCI reference."""


@dataclass(frozen=True)
class Reference:
    """A parsed registry reference."""

    registry: str
    repository: str
    tag: Optional[str] = None
    digest: Optional[str] = None
    explicit_registry: bool = True

    @property
    def target(self) -> str:
        """Return the manifest selector: the digest when pinned, else the tag."""
        return self.digest or self.tag or DEFAULT_TAG

    @property
    def api_host(self) -> str:
        if self.registry == DEFAULT_REGISTRY:
            return "registry-1.docker.io"
        return self.registry

    def __str__(self) -> str:
        text = f"{self.registry}/{self.repository}"
        if self.tag:
            text += f":{self.tag}"
        if self.digest:
            text += f"@{self.digest}"
        return text


def _is_domain(segment: str) -> bool:
    if segment == "localhost":
        return True
    if "." not in segment and ":" not in segment:
        return False
    return bool(_DOMAIN_RE.match(segment))


def parse_reference(text: str) -> Reference:
    """Parse ``registry[:port]/repository[:tag][@digest]``."""
    if not text or text != text.strip():
        raise InvalidReferenceError(f"Invalid reference '{text}'")

    remainder = text
    digest: Optional[str] = None
    if "@" in remainder:
        remainder, digest = remainder.split("@", 1)
        if not _DIGEST_RE.match(digest):
            raise InvalidReferenceError(f"Invalid digest in reference '{text}'")

    tag: Optional[str] = None
    last_slash = remainder.rfind("/")
    last_colon = remainder.rfind(":")
    if last_colon > last_slash:
        remainder, tag = remainder[:last_colon], remainder[last_colon + 1 :]
        if not _TAG_RE.match(tag):
            raise InvalidReferenceError(f"Invalid tag in reference '{text}'")

    segments = remainder.split("/")
    explicit_registry = len(segments) > 1 and _is_domain(segments[0])
    if explicit_registry:
        registry = segments[0]
        segments = segments[1:]
    else:
        registry = DEFAULT_REGISTRY
        if len(segments) == 1:
            segments = ["library", *segments]

    if not segments or not all(_COMPONENT_RE.match(segment) for segment in segments):
        raise InvalidReferenceError(f"Invalid repository name in reference '{text}'")

    if tag is None and digest is None:
        tag = DEFAULT_TAG

    return Reference(
        registry=registry,
        repository="/".join(segments),
        tag=tag,
        digest=digest,
        explicit_registry=explicit_registry,
    )


def is_probably_oci_reference(text: str) -> bool:
    """Return True when ``text`` names an artifact on an explicit registry.

    Relative paths such as ``foo/spin.toml`` parse as Docker Hub references,
    so a reference only counts when its registry host is spelled out.
    """
    try:
        reference = parse_reference(text)
    except InvalidReferenceError:
        return False
    return reference.explicit_registry


__all__ = [
    "DEFAULT_REGISTRY",
    "Reference",
    "InvalidReferenceError",
    "is_probably_oci_reference",
    "parse_reference",
]
