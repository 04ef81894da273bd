"""Text renderers for locked application reports."""

from .component import ComponentRenderer
from .metadata import (
    render_host_requirements,
    render_metadata,
    render_trigger,
    render_variables,
)

__all__ = [
    "ComponentRenderer",
    "render_host_requirements",
    "render_metadata",
    "render_trigger",
    "render_variables",
]
