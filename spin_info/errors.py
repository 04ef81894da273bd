"""Exception types raised while resolving, loading and rendering applications."""

from __future__ import annotations


class InfoError(RuntimeError):
    """Base class for failures surfaced to the spin-info CLI."""


class ConfigError(InfoError):
    """Raised when the configuration file cannot be parsed."""


class SourceError(InfoError):
    """Raised when no usable application source could be determined."""


class UnsupportedSourceError(InfoError):
    """Raised for source kinds that cannot be inspected yet."""


class RegistryError(InfoError):
    """Raised when the registry rejects or fails a request."""

    def __init__(self, message: str, *, status: int | None = None, url: str | None = None) -> None:
        super().__init__(message)
        self.status = status
        self.url = url


class LoadError(InfoError):
    """Raised when a locked application could not be loaded from a registry."""

    def __init__(self, message: str, *, phase: str, reference: str) -> None:
        super().__init__(message)
        self.phase = phase
        self.reference = reference


class MalformedManifestError(InfoError):
    """Raised when required manifest fields are missing or have the wrong shape."""


class ComponentSourceError(InfoError):
    """Raised when a component or mount source cannot be located on disk."""


class RenderError(InfoError):
    """Raised when a single component fails to render."""

    def __init__(self, message: str, *, index: int, component_id: str) -> None:
        super().__init__(message)
        self.index = index
        self.component_id = component_id


def format_error_chain(exc: BaseException) -> str:
    """Return the exception message followed by its causes, one per line."""
    lines = [str(exc) or exc.__class__.__name__]
    seen = {id(exc)}
    cause = exc.__cause__
    while cause is not None and id(cause) not in seen:
        seen.add(id(cause))
        message = str(cause) or cause.__class__.__name__
        if message not in lines:
            lines.append(f"Caused by: {message}")
        cause = cause.__cause__
    return "\n".join(lines)


__all__ = [
    "ComponentSourceError",
    "ConfigError",
    "InfoError",
    "LoadError",
    "MalformedManifestError",
    "RegistryError",
    "RenderError",
    "SourceError",
    "UnsupportedSourceError",
    "format_error_chain",
]
