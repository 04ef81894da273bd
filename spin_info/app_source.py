"""Classification of user-supplied application sources."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .logging import get_logger
from .oci.reference import is_probably_oci_reference

DEFAULT_MANIFEST_FILE = "spin.toml"

logger = get_logger("app_source")


@dataclass(frozen=True)
class FileSource:
    """A manifest file that exists on the local filesystem."""

    path: Path


@dataclass(frozen=True)
class RegistrySource:
    """A string that looks like an artifact reference on an OCI registry."""

    reference: str


@dataclass(frozen=True)
class UnresolvableSource:
    """Input that names neither a local file nor a registry artifact."""

    reason: str


@dataclass(frozen=True)
class NoSource:
    """No source was supplied."""


AppSource = Union[FileSource, RegistrySource, UnresolvableSource, NoSource]


class ManifestPathError(ValueError):
    """Raised when a path does not lead to an application manifest."""


def resolve_manifest_file_path(path: Path) -> Path:
    """Return the canonical manifest file for a file or application directory."""
    if path.is_file():
        return path.resolve()
    if path.is_dir():
        candidate = path / DEFAULT_MANIFEST_FILE
        if candidate.is_file():
            return candidate.resolve()
        raise ManifestPathError(
            f"Directory {path} does not contain a file named '{DEFAULT_MANIFEST_FILE}'"
        )
    raise ManifestPathError(f"Path {path} does not exist")


def infer_source(source: str) -> AppSource:
    """Classify ``source`` as a local file, a registry reference or neither."""
    path = Path(source)
    if path.exists():
        return infer_file_source(path)
    if is_probably_oci_reference(source):
        return RegistrySource(source)
    return UnresolvableSource(
        f"File or directory '{source}' not found. If you meant to load from a registry, "
        "use the `--from-registry` option."
    )


def infer_file_source(path: Union[str, Path]) -> AppSource:
    try:
        return FileSource(resolve_manifest_file_path(Path(path)))
    except ManifestPathError as exc:
        return UnresolvableSource(str(exc))


def infer_registry_source(reference: str) -> AppSource:
    return RegistrySource(reference)


def unresolvable(message: str) -> AppSource:
    return UnresolvableSource(message)


def select_source(
    app_source: Optional[str] = None,
    *,
    from_file: Optional[str] = None,
    from_registry: Optional[str] = None,
) -> AppSource:
    """Resolve the single source named by the ``--from*`` options.

    Never guesses: zero or several sources yield an unresolvable source.
    """
    given = [value for value in (app_source, from_file, from_registry) if value is not None]
    if len(given) > 1:
        return unresolvable("More than one application source was specified")
    if not given:
        return unresolvable(
            "No application source was specified. "
            "Use `--from`, `--from-file` or `--from-registry`."
        )
    if from_file is not None:
        return infer_file_source(from_file)
    if from_registry is not None:
        return infer_registry_source(from_registry)
    return infer_source(given[0])


def local_app_dir(source: AppSource) -> Optional[Path]:
    """Return the directory holding a local manifest, if the source is a file."""
    if not isinstance(source, FileSource):
        return None
    parent = source.path.parent
    if parent == source.path:
        logger.warning("Error finding local app dir from source %s", source.path)
        return None
    return parent


__all__ = [
    "AppSource",
    "DEFAULT_MANIFEST_FILE",
    "FileSource",
    "ManifestPathError",
    "NoSource",
    "RegistrySource",
    "UnresolvableSource",
    "infer_file_source",
    "infer_registry_source",
    "infer_source",
    "local_app_dir",
    "resolve_manifest_file_path",
    "select_source",
    "unresolvable",
]
