"""On-disk size measurement for component artifacts and mounted files."""

from __future__ import annotations

import os
import stat as stat_module
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Iterable, List, Optional, Tuple
from urllib.parse import urlparse
from urllib.request import url2pathname

from .errors import ComponentSourceError

_UNITS = ("KB", "MB", "GB", "TB", "PB")

Walker = Callable[..., Iterable[Tuple[str, List[str], List[str]]]]
Stat = Callable[[Any], os.stat_result]


@dataclass(frozen=True)
class TreeSize:
    """Count and total byte size of the regular files under a path."""

    files: int
    total_bytes: int


def file_uri_to_path(uri: Optional[str], context: str) -> Path:
    """Convert a ``file://`` URI into a local path."""
    if not uri:
        raise ComponentSourceError(f"{context} has no source URI")
    parsed = urlparse(uri)
    if parsed.scheme != "file":
        raise ComponentSourceError(f"{context} source '{uri}' is not a file:// URI")
    if parsed.netloc not in ("", "localhost"):
        raise ComponentSourceError(f"{context} source '{uri}' does not address a local file")
    return Path(url2pathname(parsed.path))


def file_size(path: Path, context: str, *, stat: Stat = os.stat) -> int:
    """Return the byte size of a single file."""
    try:
        result = stat(path)
    except OSError as exc:
        raise ComponentSourceError(f"{context}: cannot stat {path}: {exc.strerror or exc}") from exc
    return result.st_size


def measure_tree(
    root: Path,
    *,
    walk: Walker = os.walk,
    stat: Stat = os.stat,
    lstat: Stat = os.lstat,
) -> TreeSize:
    """Count regular files under ``root`` and sum their sizes.

    The root itself is resolved even when it is a symlink. Below the root,
    symlinks are neither followed nor counted, and directories and other
    non-regular entries contribute nothing.
    """
    try:
        root_stat = stat(root)
    except OSError as exc:
        raise ComponentSourceError(f"Cannot stat {root}: {exc.strerror or exc}") from exc

    if stat_module.S_ISREG(root_stat.st_mode):
        return TreeSize(files=1, total_bytes=root_stat.st_size)
    if not stat_module.S_ISDIR(root_stat.st_mode):
        return TreeSize(files=0, total_bytes=0)

    def _on_error(error: OSError) -> None:
        raise ComponentSourceError(f"Cannot read {error.filename}: {error.strerror or error}") from error

    files = 0
    total = 0
    for dirpath, _dirnames, filenames in walk(root, onerror=_on_error, followlinks=False):
        for name in filenames:
            entry = os.path.join(dirpath, name)
            try:
                entry_stat = lstat(entry)
            except OSError as exc:
                raise ComponentSourceError(f"Cannot stat {entry}: {exc.strerror or exc}") from exc
            if not stat_module.S_ISREG(entry_stat.st_mode):
                continue
            files += 1
            total += entry_stat.st_size
    return TreeSize(files=files, total_bytes=total)


def format_size(num_bytes: int) -> str:
    """Render a byte count with binary (1024) thresholds and one decimal."""
    if num_bytes < 1024:
        return f"{num_bytes} B"
    value = float(num_bytes)
    for unit in _UNITS:
        value /= 1024
        if round(value, 1) < 1024 or unit == _UNITS[-1]:
            return f"{value:.1f} {unit}"
    raise AssertionError("unreachable")  # pragma: no cover


__all__ = ["TreeSize", "file_size", "file_uri_to_path", "format_size", "measure_tree"]
