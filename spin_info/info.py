"""Report driver: resolve the source, load the app and render every section."""

from __future__ import annotations

from typing import Callable, List

from .app_source import (
    AppSource,
    FileSource,
    NoSource,
    RegistrySource,
    UnresolvableSource,
    local_app_dir,
)
from .config import InfoConfig, default_cache_dir
from .errors import (
    InfoError,
    LoadError,
    RenderError,
    SourceError,
    UnsupportedSourceError,
)
from .loader import ManifestLoader
from .logging import get_logger
from .models import LockedApp
from .oci import OciLoader, RegistryClient
from .render import (
    ComponentRenderer,
    render_host_requirements,
    render_metadata,
    render_trigger,
    render_variables,
)

LoaderFactory = Callable[[InfoConfig], ManifestLoader]


def default_loader_factory(config: InfoConfig) -> ManifestLoader:
    """Build the registry-backed loader described by ``config``."""
    client = RegistryClient(
        config.cache_dir or default_cache_dir(),
        insecure=config.insecure,
        credentials=config.registry,
        request_timeout=config.request_timeout,
    )
    return OciLoader(client)


class InfoCommand:
    """Produces the info report for a single application source.

    The full report is rendered before anything is written, so a failure in
    any section leaves no partial output behind.
    """

    def __init__(
        self,
        source: AppSource,
        *,
        config: InfoConfig | None = None,
        loader_factory: LoaderFactory = default_loader_factory,
        component_renderer: ComponentRenderer | None = None,
        output: Callable[[str], None] = print,
    ) -> None:
        self.source = source
        self.config = config or InfoConfig()
        self.loader_factory = loader_factory
        self.component_renderer = component_renderer or ComponentRenderer()
        self.output = output
        self.logger = get_logger("info")

    async def run(self) -> List[str]:
        """Render the report and write it line by line to ``output``."""
        lines = await self.build_report()
        for line in lines:
            self.output(line)
        return lines

    async def build_report(self) -> List[str]:
        source = self.source
        if isinstance(source, NoSource):
            raise SourceError("No application source was specified")
        if isinstance(source, UnresolvableSource):
            raise SourceError(source.reason)
        if isinstance(source, FileSource):
            self.logger.debug("Local application directory: %s", local_app_dir(source))
            raise UnsupportedSourceError(
                f"Getting info for local application {source.path} is not supported yet. "
                "Push the application and use `--from-registry`."
            )
        if isinstance(source, RegistrySource):
            return await self._registry_report(source.reference)
        raise TypeError(f"Unknown application source: {source!r}")

    async def _registry_report(self, reference: str) -> List[str]:
        self.logger.info("Loading application %s", reference)
        try:
            loader = self.loader_factory(self.config)
        except (InfoError, OSError) as exc:
            raise LoadError(
                "cannot create registry client", phase="client", reference=reference
            ) from exc

        async with loader:
            try:
                app = await loader.load(reference)
            except (InfoError, OSError) as exc:
                raise LoadError(
                    f"Failed to load application '{reference}'", phase="load", reference=reference
                ) from exc
            # Staged files only exist while the loader is open.
            lines = [f'Getting info for app "{reference}"']
            lines.extend(self.render_app(app))
        return lines

    def render_app(self, app: LockedApp) -> List[str]:
        """Render the header sections then each component in manifest order.

        A component that fails to render aborts the whole report.
        """
        lines = render_metadata(app.metadata)
        lines.extend(render_trigger(trigger) for trigger in app.triggers)
        lines.extend(render_variables(app.variables))
        lines.extend(render_host_requirements(app.host_requirements))

        for index, component in enumerate(app.components):
            try:
                block = self.component_renderer.render(component)
            except InfoError as exc:
                raise RenderError(
                    f"Failed to render component {index} ('{component.id}')",
                    index=index,
                    component_id=component.id,
                ) from exc
            lines.append("")
            lines.extend(block)
        return lines


__all__ = ["InfoCommand", "LoaderFactory", "default_loader_factory"]
