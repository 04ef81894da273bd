"""Contract for collaborators that turn a registry reference into a locked app."""

from __future__ import annotations

from abc import ABC, abstractmethod
from types import TracebackType
from typing import Optional, Type

from .models import LockedApp


class ManifestLoader(ABC):
    """Loads locked applications and owns any storage needed to do so.

    Loaders are async context managers. Paths referenced by a loaded
    application are only valid until the context exits.
    """

    @abstractmethod
    async def load(self, reference: str) -> LockedApp:
        """Return the locked application published at ``reference``."""

    async def __aenter__(self) -> "ManifestLoader":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        return None


__all__ = ["ManifestLoader"]
